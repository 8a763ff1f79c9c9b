import logging
from datetime import timedelta

from sqlalchemy import func

from erp_api import db
from erp_api.crud.list_query import ListQuery
from erp_api.models import DetailedLog
from erp_api.utils.date_utils import utc_now
from erp_api.utils.db_utils import get_or_404
from erp_api.utils.serializers import USER_CONTACT, iso, ref

logger = logging.getLogger(__name__)

NOT_FOUND = 'Log entry not found'


def _row_to_dict(log):
    return {
        'id': str(log.id),
        'user': ref(log.user, *USER_CONTACT),
        'action': log.action,
        'tableName': log.table_name,
        'recordId': log.record_id,
        'oldValues': log.old_values,
        'newValues': log.new_values,
        'ipAddress': log.ip_address,
        'userAgent': log.user_agent,
        'createdAt': iso(log.created_at),
    }


log_list = ListQuery(
    DetailedLog,
    _row_to_dict,
    search_fields=(DetailedLog.action, DetailedLog.table_name),
    filters={
        'action': DetailedLog.action,
        'tableName': DetailedLog.table_name,
        'user': DetailedLog.user_id,
        'recordId': DetailedLog.record_id,
    },
    date_field=DetailedLog.created_at,
    order_by=(DetailedLog.created_at.desc(),),
    active_only=False,
)


def list_logs(args):
    return log_list.run(args)


def get_log_detail(log_id):
    return _row_to_dict(get_or_404(DetailedLog, log_id, NOT_FOUND))


def get_logs_summary():
    """Counts by action and by table, plus the number of entries in the last 24 hours."""
    by_action = db.session.query(DetailedLog.action, func.count(DetailedLog.id)) \
        .group_by(DetailedLog.action).order_by(func.count(DetailedLog.id).desc()).all()
    by_table = db.session.query(DetailedLog.table_name, func.count(DetailedLog.id)) \
        .group_by(DetailedLog.table_name).order_by(func.count(DetailedLog.id).desc()).all()
    return {
        'totalLogs': DetailedLog.query.count(),
        'lastDay': DetailedLog.query.filter(DetailedLog.created_at >= utc_now() - timedelta(days=1)).count(),
        'byAction': [{'action': action, 'count': count} for action, count in by_action],
        'byTable': [{'tableName': table, 'count': count} for table, count in by_table],
    }
