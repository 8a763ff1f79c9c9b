import uuid

from flask import has_request_context, request

from erp_api import db
from erp_api.models import DetailedLog


def log_action(user_id, action, table_name, record_id, old_values=None, new_values=None):
    """Queue an audit row in the current session; it commits with the change it describes."""
    ip_address = None
    user_agent = None
    if has_request_context():
        ip_address = request.remote_addr
        user_agent = request.headers.get('User-Agent')

    if user_id is not None and not isinstance(user_id, uuid.UUID):
        user_id = uuid.UUID(str(user_id))

    log = DetailedLog(
        user_id=user_id,
        action=action,
        table_name=table_name,
        record_id=str(record_id) if record_id is not None else None,
        old_values=old_values,
        new_values=new_values,
        ip_address=ip_address,
        user_agent=user_agent
    )
    db.session.add(log)
    return log
