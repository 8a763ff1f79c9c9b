from flask import request
from flask_jwt_extended import jwt_required

from . import main
from ..crud import support_crud
from ..schemas.support import (
    AssignIn, ConversationIn, SatisfactionIn, StatusIn, TicketCreate, TicketUpdate,
)
from ..utils.api_response import load_payload, success_response
from ..utils.auth_utils import current_user_id


@main.route('/support', methods=['GET'])
@jwt_required()
def list_tickets():
    items, pagination = support_crud.list_tickets(request.args)
    return success_response(items, pagination=pagination)


@main.route('/support/stats', methods=['GET'])
@jwt_required()
def support_stats():
    return success_response(support_crud.get_support_stats())


@main.route('/support/overdue', methods=['GET'])
@jwt_required()
def overdue_tickets():
    return success_response(support_crud.get_overdue_tickets())


@main.route('/support', methods=['POST'])
@jwt_required()
def create_ticket():
    payload = load_payload(TicketCreate)
    ticket = support_crud.create_ticket(payload, current_user_id())
    return success_response(ticket, 'Support ticket created successfully', 201)


@main.route('/support/<string:id>', methods=['GET'])
@jwt_required()
def get_ticket(id):
    return success_response(support_crud.get_ticket_detail(id))


@main.route('/support/<string:id>', methods=['PUT'])
@jwt_required()
def update_ticket(id):
    payload = load_payload(TicketUpdate)
    ticket = support_crud.update_ticket(id, payload, current_user_id())
    return success_response(ticket, 'Support ticket updated successfully')


@main.route('/support/<string:id>', methods=['DELETE'])
@jwt_required()
def delete_ticket(id):
    support_crud.delete_ticket(id, current_user_id())
    return success_response(message='Support ticket deleted successfully')


@main.route('/support/<string:id>/conversations', methods=['POST'])
@jwt_required()
def add_conversation(id):
    payload = load_payload(ConversationIn)
    conversations = support_crud.add_conversation(id, payload, current_user_id())
    return success_response(conversations, 'Conversation added successfully')


@main.route('/support/<string:id>/assign', methods=['PUT'])
@jwt_required()
def assign_ticket(id):
    payload = load_payload(AssignIn)
    ticket = support_crud.assign_ticket(id, payload, current_user_id())
    return success_response(ticket, 'Ticket assigned successfully')


@main.route('/support/<string:id>/status', methods=['PUT'])
@jwt_required()
def update_ticket_status(id):
    payload = load_payload(StatusIn)
    ticket = support_crud.update_ticket_status(id, payload, current_user_id())
    return success_response(ticket, 'Ticket status updated successfully')


@main.route('/support/<string:id>/satisfaction', methods=['POST'])
@jwt_required()
def add_satisfaction(id):
    payload = load_payload(SatisfactionIn)
    satisfaction = support_crud.add_satisfaction(id, payload, current_user_id())
    return success_response(satisfaction, 'Satisfaction rating added successfully')
