from ..exceptions import InvalidStateError


class StateMachine:
    """
    Table of allowed (state, action) -> new state moves.

    `messages` maps an action to the error raised when the move is not in the
    table; messages are format strings receiving `state`, `action` and any
    context passed to `apply`.
    """

    def __init__(self, name, transitions, messages=None):
        self.name = name
        self.transitions = dict(transitions)
        self.messages = messages or {}

    def can(self, state, action):
        return (state, action) in self.transitions

    def apply(self, state, action, **context):
        try:
            return self.transitions[(state, action)]
        except KeyError:
            template = self.messages.get(action, "Cannot {action} {name} in state '{state}'")
            raise InvalidStateError(
                template.format(state=state, action=action, name=self.name, **context)
            ) from None


TRANSACTION_FLOW = StateMachine(
    'transaction',
    {
        ('draft', 'approve'): 'approved',
        ('approved', 'post'): 'posted',
        ('posted', 'reconcile'): 'reconciled',
    },
    messages={
        'approve': 'Only draft transactions can be approved',
        'post': 'Transaction must be approved before posting',
        'reconcile': 'Only posted transactions can be reconciled',
    }
)

BOOKING_FLOW = StateMachine(
    'resource',
    {
        ('available', 'book'): 'booked',
        ('booked', 'release'): 'available',
    },
    messages={
        'book': '{label} is not available',
        'release': '{label} is not booked',
    }
)

TICKET_STATUSES = ('open', 'in_progress', 'waiting_customer', 'waiting_support', 'resolved', 'closed')

# A ticket may move to any other status; the action is the target status.
TICKET_FLOW = StateMachine(
    'ticket',
    {(current, target): target for current in TICKET_STATUSES for target in TICKET_STATUSES if current != target},
    messages={status: 'Ticket is already {state}' for status in TICKET_STATUSES}
)


def booking_state(is_available):
    return 'available' if is_available else 'booked'
