"""
Handovers — the single public interface for handover operations.

Usage:
    from handoverman import handovers, Actor

    actor = Actor.for_user(request.user)
    handover = handovers.request(actor, drill, 2, reason='Site visit')
    handovers.approve(Actor.for_user(manager), handover.pk)
    handovers.return_items(actor, handover.pk)
"""

from handoverman.services.handovers import HandoverLifecycle
from handoverman.services.queries import HandoverQueries


class Handovers(HandoverLifecycle, HandoverQueries):
    """
    Handover state machine plus its read-only queries.

    Parameter convention: (actor, target, ...). The actor is always the
    user recorded on the transition; there is no acting on behalf of
    someone else.

    IMPORTANT: All state-changing methods use atomic transactions with
    conditional updates. See each method's docstring.
    """
