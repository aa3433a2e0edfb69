"""
interest_registry: project registry with interest sign-ups and deferred
activation.

A Project moves through created → active/inactive → suspended. Callers can
register interest (an email) in an active project, and schedule a one-shot,
cancellable activation that fires after a delay.
"""
