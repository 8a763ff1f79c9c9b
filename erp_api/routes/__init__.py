from flask import Blueprint

main = Blueprint('main', __name__)

from . import account_routes
from . import transaction_routes
from . import customer_routes
from . import supplier_routes
from . import product_routes
from . import machine_routes
from . import tool_routes
from . import workstation_routes
from . import attendance_routes
from . import support_routes
from . import user_routes
from . import settings_routes
from . import sales_outlet_routes
from . import service_template_routes
from . import log_routes
