import logging
from datetime import timedelta

from sqlalchemy import func, or_

from erp_api import db
from erp_api.crud.list_query import ListQuery
from erp_api.exceptions import ValidationError
from erp_api.models import Customer, SupportTicket, TicketConversation, User
from erp_api.utils.date_utils import utc_now
from erp_api.utils.db_utils import get_or_404, next_sequence, transaction_scope
from erp_api.utils.logging_utils import log_action
from erp_api.utils.serializers import USER_CONTACT, USER_NAME, iso, ref, ref_id
from erp_api.utils.state_machine import TICKET_FLOW

logger = logging.getLogger(__name__)

NOT_FOUND = 'Support ticket not found'
DUPLICATE_NUMBER = 'Support ticket with this number already exists'
CLOSED_STATUSES = ('resolved', 'closed')

# Hours after creation
FIRST_RESPONSE_DUE = 24
RESOLUTION_DUE = 72


def _conversation_to_dict(conversation):
    return {
        'id': str(conversation.id),
        'user': ref(conversation.user, *USER_CONTACT),
        'message': conversation.message,
        'isInternal': conversation.is_internal,
        'attachments': conversation.attachments or [],
        'createdAt': iso(conversation.created_at),
    }


def _row_to_dict(ticket):
    return {
        'id': str(ticket.id),
        'ticketNumber': ticket.ticket_number,
        'subject': ticket.subject,
        'description': ticket.description,
        'customer': ref(ticket.customer, *USER_CONTACT),
        'assignedTo': ref(ticket.assignee, *USER_NAME),
        'category': ticket.category,
        'priority': ticket.priority,
        'status': ticket.status,
        'type': ticket.type,
        'conversations': [_conversation_to_dict(item) for item in ticket.conversations],
        'attachments': ticket.attachments or [],
        'tags': ticket.tags or [],
        'sla': {
            'responseTime': ticket.sla_response_time,
            'resolutionTime': ticket.sla_resolution_time,
            'firstResponseAt': iso(ticket.first_response_at),
            'resolvedAt': iso(ticket.resolved_at),
            'closedAt': iso(ticket.closed_at),
        },
        'satisfaction': {
            'rating': ticket.satisfaction_rating,
            'feedback': ticket.satisfaction_feedback,
            'ratedAt': iso(ticket.rated_at),
        },
        'isActive': ticket.is_active,
        'createdBy': ref(ticket.creator, *USER_NAME),
        'lastUpdatedBy': ref_id(ticket.last_updated_by),
        'createdAt': iso(ticket.created_at),
        'updatedAt': iso(ticket.updated_at),
    }


ticket_list = ListQuery(
    SupportTicket,
    _row_to_dict,
    search_fields=(SupportTicket.subject, SupportTicket.ticket_number, SupportTicket.description),
    filters={
        'status': SupportTicket.status,
        'priority': SupportTicket.priority,
        'category': SupportTicket.category,
        'assignedTo': SupportTicket.assigned_to,
        'type': SupportTicket.type,
    },
    order_by=(SupportTicket.created_at.desc(),),
)


def _apply_fields(ticket, payload):
    data = payload.changes()
    if data.pop('sla', None) is not None:
        sla = payload.sla.values()
        if 'response_time' in sla:
            ticket.sla_response_time = sla['response_time']
        if 'resolution_time' in sla:
            ticket.sla_resolution_time = sla['resolution_time']
    if 'customer' in data:
        ticket.customer_id = get_or_404(Customer, data.pop('customer'), 'Customer not found').id
    if 'assigned_to' in data:
        assignee_id = data.pop('assigned_to')
        if assignee_id is not None:
            get_or_404(User, assignee_id, 'Assignee not found')
        ticket.assigned_to = assignee_id
    for key, value in data.items():
        setattr(ticket, key, value)


def list_tickets(args):
    return ticket_list.run(args)


def get_ticket(ticket_id):
    return get_or_404(SupportTicket, ticket_id, NOT_FOUND)


def get_ticket_detail(ticket_id):
    return _row_to_dict(get_ticket(ticket_id))


def create_ticket(payload, current_user_id):
    ticket = SupportTicket(created_by=current_user_id)
    with transaction_scope(DUPLICATE_NUMBER):
        _apply_fields(ticket, payload)
        ticket.ticket_number = next_sequence(SupportTicket.ticket_number, 'TKT', 6)
        db.session.add(ticket)
        db.session.flush()
        log_action(current_user_id, 'CREATE', 'support_tickets', ticket.id, None, payload.audit_values())
    logger.info(f"Support ticket {ticket.ticket_number} created")
    return _row_to_dict(ticket)


def update_ticket(ticket_id, payload, current_user_id):
    ticket = get_ticket(ticket_id)
    old_values = _row_to_dict(ticket)
    with transaction_scope():
        _apply_fields(ticket, payload)
        ticket.last_updated_by = current_user_id
        log_action(current_user_id, 'UPDATE', 'support_tickets', ticket.id, old_values, payload.audit_values())
    return _row_to_dict(ticket)


def delete_ticket(ticket_id, current_user_id):
    ticket = get_ticket(ticket_id)
    with transaction_scope():
        ticket.is_active = False
        ticket.last_updated_by = current_user_id
        log_action(current_user_id, 'DELETE', 'support_tickets', ticket.id, {'isActive': True}, {'isActive': False})
    return True


def add_conversation(ticket_id, payload, current_user_id):
    """Append a message; the first reply from anyone but the ticket's creator stamps firstResponseAt."""
    ticket = get_ticket(ticket_id)
    with transaction_scope():
        ticket.conversations.append(TicketConversation(
            user_id=current_user_id,
            message=payload.message,
            is_internal=payload.is_internal,
            attachments=payload.attachments or []
        ))
        if ticket.first_response_at is None and ticket.created_by != current_user_id:
            ticket.first_response_at = utc_now()
        ticket.last_updated_by = current_user_id
        log_action(current_user_id, 'ADD_CONVERSATION', 'support_tickets', ticket.id, None, payload.audit_values())
    return [_conversation_to_dict(item) for item in ticket.conversations]


def assign_ticket(ticket_id, payload, current_user_id):
    ticket = get_ticket(ticket_id)
    assignee = get_or_404(User, payload.assigned_to, 'Assignee not found')
    old_assignee = ref_id(ticket.assigned_to)
    with transaction_scope():
        ticket.assigned_to = assignee.id
        ticket.last_updated_by = current_user_id
        log_action(current_user_id, 'ASSIGN', 'support_tickets', ticket.id,
                   {'assignedTo': old_assignee}, {'assignedTo': str(assignee.id)})
    return _row_to_dict(ticket)


def update_ticket_status(ticket_id, payload, current_user_id):
    ticket = get_ticket(ticket_id)
    old_status = ticket.status
    with transaction_scope():
        ticket.status = TICKET_FLOW.apply(old_status, payload.status)
        if ticket.status == 'resolved':
            ticket.resolved_at = utc_now()
        elif ticket.status == 'closed':
            ticket.closed_at = utc_now()
        ticket.last_updated_by = current_user_id
        log_action(current_user_id, 'STATUS_CHANGE', 'support_tickets', ticket.id,
                   {'status': old_status}, {'status': ticket.status})
    return _row_to_dict(ticket)


def add_satisfaction(ticket_id, payload, current_user_id):
    if payload.rating < 1 or payload.rating > 5:
        raise ValidationError('Rating must be between 1 and 5')

    ticket = get_ticket(ticket_id)
    with transaction_scope():
        ticket.satisfaction_rating = payload.rating
        ticket.satisfaction_feedback = payload.feedback
        ticket.rated_at = utc_now()
        log_action(current_user_id, 'RATE', 'support_tickets', ticket.id, None, payload.audit_values())
    return {
        'rating': ticket.satisfaction_rating,
        'feedback': ticket.satisfaction_feedback,
        'ratedAt': iso(ticket.rated_at),
    }


def _count_by(column):
    return db.session.query(column, func.count(SupportTicket.id)) \
        .filter(SupportTicket.is_active.is_(True)).group_by(column).all()


def _overdue_query():
    now = utc_now()
    return SupportTicket.query.filter(
        SupportTicket.is_active.is_(True),
        SupportTicket.status.notin_(CLOSED_STATUSES),
        or_(
            (SupportTicket.first_response_at.is_(None)) &
            (SupportTicket.created_at <= now - timedelta(hours=FIRST_RESPONSE_DUE)),
            SupportTicket.created_at <= now - timedelta(hours=RESOLUTION_DUE)
        )
    )


def get_support_stats():
    responded = SupportTicket.query.filter(
        SupportTicket.is_active.is_(True),
        SupportTicket.first_response_at.isnot(None)
    ).all()
    response_hours = [
        (ticket.first_response_at - ticket.created_at) / timedelta(hours=1) for ticket in responded
    ]
    return {
        'totalTickets': SupportTicket.query.filter(SupportTicket.is_active.is_(True)).count(),
        'statusStats': [{'status': status, 'count': count} for status, count in _count_by(SupportTicket.status)],
        'priorityStats': [{'priority': priority, 'count': count}
                          for priority, count in _count_by(SupportTicket.priority)],
        'categoryStats': [{'category': category, 'count': count}
                          for category, count in _count_by(SupportTicket.category)],
        'avgResponseTimeHours': round(sum(response_hours) / len(response_hours), 2) if response_hours else 0,
        'overdueTickets': _overdue_query().count(),
    }


def get_overdue_tickets():
    tickets = _overdue_query().order_by(SupportTicket.created_at.asc()).all()
    return [_row_to_dict(ticket) for ticket in tickets]
