import logging
import os
import secrets
import threading
import time

from flask import current_app
from werkzeug.utils import secure_filename

from erp_api import db
from erp_api.exceptions import ValidationError
from erp_api.models import Setting
from erp_api.utils.date_utils import utc_now
from erp_api.utils.db_utils import transaction_scope
from erp_api.utils.logging_utils import log_action
from erp_api.utils.serializers import iso, ref_id

logger = logging.getLogger(__name__)

SECTIONS = ('company', 'appearance', 'notifications', 'system')
LOGO_URL_PREFIX = '/uploads/logos/'
EMPTY_LOGO = {'url': '', 'filename': '', 'originalName': ''}

_settings_lock = threading.Lock()


def _default_currencies():
    now = iso(utc_now())
    return [
        {'code': 'USD', 'name': 'US Dollar', 'symbol': '$', 'exchangeRate': 1,
         'isActive': True, 'lastUpdated': now},
        {'code': 'ZWL', 'name': 'Zimbabwean Dollar (ZIG)', 'symbol': 'Z$', 'exchangeRate': 30,
         'isActive': True, 'lastUpdated': now},
    ]


def default_sections():
    return {
        'company': {
            'name': '',
            'code': '',
            'taxId': '',
            'website': '',
            'email': '',
            'phone': '',
            'logo': dict(EMPTY_LOGO),
            'address': {'street': '', 'city': '', 'state': '', 'zipCode': '', 'country': ''},
            'defaultCurrency': 'USD',
            'defaultTaxRate': 10,
            'currencySettings': {
                'baseCurrency': 'USD',
                'supportedCurrencies': _default_currencies(),
                'defaultDisplayCurrency': 'USD',
                'autoUpdateRates': True,
                'updateFrequency': 'daily',
            },
            'invoiceSettings': {
                'prefix': 'INV',
                'numberFormat': 'INV-{YYYY}-{MM}-{####}',
                'footerText': 'Thank you for your business!',
                'termsAndConditions': '',
            },
            'posSettings': {
                'receiptHeader': '',
                'receiptFooter': '',
                'showTaxBreakdown': True,
                'autoPrint': False,
            },
        },
        'appearance': {'theme': 'light', 'language': 'en', 'timezone': 'UTC', 'dateFormat': 'MM/DD/YYYY'},
        'notifications': {
            'email': True,
            'sms': False,
            'push': True,
            'lowStockAlert': True,
            'newOrderAlert': True,
            'paymentReminder': True,
        },
        'system': {
            'maintenanceMode': False,
            'allowRegistration': True,
            'sessionTimeout': 30,
            'maxLoginAttempts': 5,
            'passwordPolicy': {
                'minLength': 8,
                'requireUppercase': True,
                'requireLowercase': True,
                'requireNumbers': True,
                'requireSpecialChars': False,
            },
            'backupSettings': {'autoBackup': True, 'backupFrequency': 'daily', 'retentionDays': 30},
        },
    }


def _row_to_dict(settings):
    data = {'id': str(settings.id)}
    for section in SECTIONS:
        data[section] = getattr(settings, section) or {}
    data.update({
        'isActive': settings.is_active,
        'updatedBy': ref_id(settings.last_updated_by),
        'createdAt': iso(settings.created_at),
        'updatedAt': iso(settings.updated_at),
    })
    return data


def _active_settings():
    return Setting.query.filter(Setting.is_active.is_(True)).first()


def get_settings():
    """
    The single active settings row, created with defaults on first access.
    """
    settings = _active_settings()
    if settings is not None:
        return settings

    with _settings_lock:
        settings = _active_settings()
        if settings is None:
            settings = Setting(**default_sections())
            with transaction_scope():
                db.session.add(settings)
            logger.info("Default settings created")
    return settings


def get_settings_detail():
    return _row_to_dict(get_settings())


def get_public_settings():
    settings = get_settings()
    company = settings.company or {}
    return {
        'company': {
            'name': company.get('name', ''),
            'logo': company.get('logo') or dict(EMPTY_LOGO),
            'defaultCurrency': company.get('defaultCurrency', 'USD'),
        },
        'appearance': settings.appearance or {},
    }


def update_settings(payload, current_user_id):
    """Each section sent is merged one level deep into the stored section."""
    settings = get_settings()
    old_values = _row_to_dict(settings)
    with transaction_scope():
        for section, values in payload.changes().items():
            if values is None:
                continue
            merged = dict(getattr(settings, section) or {})
            merged.update(values)
            setattr(settings, section, merged)
        settings.last_updated_by = current_user_id
        log_action(current_user_id, 'UPDATE', 'settings', settings.id, old_values, payload.audit_values())
    return _row_to_dict(settings)


def _logo_folder():
    folder = os.path.join(current_app.config['UPLOAD_FOLDER'], 'logos')
    os.makedirs(folder, exist_ok=True)
    return folder


def _remove_logo_file(filename):
    if not filename:
        return
    path = os.path.join(_logo_folder(), secure_filename(filename))
    if os.path.exists(path):
        os.remove(path)
        logger.info(f"Removed logo file {filename}")


def _file_size(file):
    stream = file.stream
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


def upload_logo(file, current_user_id):
    """
    Store an uploaded logo under UPLOAD_FOLDER/logos and point the company
    settings at it. The previously stored logo file is deleted.
    """
    if file is None or not file.filename:
        raise ValidationError('No file uploaded')

    original_name = secure_filename(file.filename)
    extension = original_name.rsplit('.', 1)[-1].lower() if '.' in original_name else ''
    if extension not in current_app.config['LOGO_EXTENSIONS']:
        raise ValidationError('Only image files are allowed')
    if _file_size(file) > current_app.config['LOGO_MAX_BYTES']:
        raise ValidationError('Logo file is too large')

    filename = f"logo-{int(time.time() * 1000)}-{secrets.randbelow(10 ** 9)}.{extension}"
    file.save(os.path.join(_logo_folder(), filename))

    settings = get_settings()
    company = dict(settings.company or {})
    old_logo = company.get('logo') or {}
    logo = {'url': f"{LOGO_URL_PREFIX}{filename}", 'filename': filename, 'originalName': file.filename}
    try:
        with transaction_scope():
            company['logo'] = logo
            settings.company = company
            settings.last_updated_by = current_user_id
            log_action(current_user_id, 'UPLOAD_LOGO', 'settings', settings.id, {'logo': old_logo}, {'logo': logo})
    except Exception:
        _remove_logo_file(filename)
        raise

    _remove_logo_file(old_logo.get('filename'))
    return logo


def delete_logo(current_user_id):
    settings = get_settings()
    company = dict(settings.company or {})
    old_logo = company.get('logo') or {}
    with transaction_scope():
        company['logo'] = dict(EMPTY_LOGO)
        settings.company = company
        settings.last_updated_by = current_user_id
        log_action(current_user_id, 'DELETE_LOGO', 'settings', settings.id, {'logo': old_logo}, {'logo': EMPTY_LOGO})
    _remove_logo_file(old_logo.get('filename'))
    return True
