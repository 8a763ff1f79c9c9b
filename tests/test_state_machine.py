"""Unit tests for the transition tables."""

import pytest

from erp_api.exceptions import InvalidStateError
from erp_api.utils.state_machine import BOOKING_FLOW, TICKET_FLOW, TRANSACTION_FLOW


def test_transaction_flow_happy_path():
    assert TRANSACTION_FLOW.apply('draft', 'approve') == 'approved'
    assert TRANSACTION_FLOW.apply('approved', 'post') == 'posted'
    assert TRANSACTION_FLOW.apply('posted', 'reconcile') == 'reconciled'


@pytest.mark.parametrize('state', ['approved', 'posted', 'reconciled', 'pending'])
def test_only_drafts_can_be_approved(state):
    with pytest.raises(InvalidStateError) as excinfo:
        TRANSACTION_FLOW.apply(state, 'approve')
    assert excinfo.value.message == 'Only draft transactions can be approved'


def test_booking_messages_name_the_resource():
    with pytest.raises(InvalidStateError) as excinfo:
        BOOKING_FLOW.apply('booked', 'book', label='Machine')
    assert excinfo.value.message == 'Machine is not available'

    with pytest.raises(InvalidStateError) as excinfo:
        BOOKING_FLOW.apply('available', 'release', label='Tool')
    assert excinfo.value.message == 'Tool is not booked'


def test_ticket_may_move_to_any_other_status():
    assert TICKET_FLOW.apply('closed', 'open') == 'open'
    assert TICKET_FLOW.apply('open', 'resolved') == 'resolved'

    with pytest.raises(InvalidStateError) as excinfo:
        TICKET_FLOW.apply('open', 'open')
    assert excinfo.value.message == 'Ticket is already open'
