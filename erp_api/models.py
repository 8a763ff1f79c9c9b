import uuid
from decimal import Decimal

from sqlalchemy import Uuid, Enum
from sqlalchemy.orm import relationship

from erp_api import db, bcrypt
from erp_api.utils.date_utils import utc_now

USER_ROLES = ('admin', 'manager', 'employee', 'customer', 'warehouse_manager',
              'warehouse_employee', 'sales_person', 'workshop_employee')
ACCOUNT_TYPES = ('asset', 'liability', 'equity', 'revenue', 'expense')
TRANSACTION_TYPES = ('sale', 'purchase', 'payment', 'receipt', 'expense', 'income',
                     'transfer', 'adjustment', 'journal')
TRANSACTION_STATUSES = ('draft', 'pending', 'approved', 'rejected', 'posted', 'reconciled')
PAYMENT_METHODS = ('cash', 'bank_transfer', 'check', 'credit_card', 'debit_card', 'other')
CUSTOMER_TYPES = ('individual', 'business')
GENDERS = ('male', 'female', 'other')
WALLET_ENTRY_TYPES = ('credit', 'debit')
SUPPLIER_STATUSES = ('active', 'inactive', 'suspended')
MACHINE_CATEGORIES = ('diagnostic', 'repair', 'lifting', 'welding', 'machining', 'testing', 'other')
MACHINE_STATUSES = ('operational', 'maintenance', 'broken', 'retired')
MAINTENANCE_SCHEDULES = ('daily', 'weekly', 'monthly', 'quarterly', 'annually', 'as_needed')
MAINTENANCE_TYPES = ('preventive', 'corrective', 'emergency')
TOOL_CATEGORIES = ('hand_tool', 'power_tool', 'diagnostic_tool', 'specialty_tool',
                   'measuring_tool', 'cutting_tool', 'other')
TOOL_CONDITIONS = ('excellent', 'good', 'fair', 'poor', 'broken')
TOOL_STATUSES = ('available', 'in_use', 'maintenance', 'lost', 'retired')
WORKSTATION_TYPES = ('repair_bay', 'diagnostic_bay', 'welding_station', 'assembly_station',
                     'inspection_station', 'paint_booth', 'other')
WORKSTATION_STATUSES = ('available', 'occupied', 'maintenance', 'out_of_order')
ATTENDANCE_STATUSES = ('present', 'absent', 'late', 'half_day', 'sick', 'vacation', 'holiday')
BREAK_TYPES = ('lunch', 'coffee', 'personal', 'other')
TICKET_CATEGORIES = ('technical', 'billing', 'general', 'bug_report', 'feature_request', 'complaint')
PRIORITIES = ('low', 'medium', 'high', 'urgent')
TICKET_STATUSES = ('open', 'in_progress', 'waiting_customer', 'waiting_support', 'resolved', 'closed')
TICKET_TYPES = ('customer', 'employee')
OUTLET_TYPES = ('retail', 'warehouse', 'online', 'mobile', 'kiosk', 'branch')
SERVICE_CATEGORIES = ('engine', 'transmission', 'suspension', 'brakes', 'electrical',
                      'air_conditioning', 'bodywork', 'maintenance', 'diagnostic', 'other')

STANDARD_WORKDAY_HOURS = 8

user_role = Enum(*USER_ROLES, name='user_role')
account_type = Enum(*ACCOUNT_TYPES, name='account_type')
transaction_type = Enum(*TRANSACTION_TYPES, name='transaction_type')
transaction_status = Enum(*TRANSACTION_STATUSES, name='transaction_status')
payment_method = Enum(*PAYMENT_METHODS, name='payment_method')
customer_type = Enum(*CUSTOMER_TYPES, name='customer_type')
gender_type = Enum(*GENDERS, name='gender_type')
wallet_entry_type = Enum(*WALLET_ENTRY_TYPES, name='wallet_entry_type')
supplier_status = Enum(*SUPPLIER_STATUSES, name='supplier_status')
machine_category = Enum(*MACHINE_CATEGORIES, name='machine_category')
machine_status = Enum(*MACHINE_STATUSES, name='machine_status')
maintenance_schedule = Enum(*MAINTENANCE_SCHEDULES, name='maintenance_schedule')
maintenance_type = Enum(*MAINTENANCE_TYPES, name='maintenance_type')
tool_category = Enum(*TOOL_CATEGORIES, name='tool_category')
tool_condition = Enum(*TOOL_CONDITIONS, name='tool_condition')
tool_status = Enum(*TOOL_STATUSES, name='tool_status')
workstation_type = Enum(*WORKSTATION_TYPES, name='workstation_type')
workstation_status = Enum(*WORKSTATION_STATUSES, name='workstation_status')
attendance_status = Enum(*ATTENDANCE_STATUSES, name='attendance_status')
break_type = Enum(*BREAK_TYPES, name='break_type')
ticket_category = Enum(*TICKET_CATEGORIES, name='ticket_category')
priority_level = Enum(*PRIORITIES, name='priority_level')
ticket_status = Enum(*TICKET_STATUSES, name='ticket_status')
ticket_type = Enum(*TICKET_TYPES, name='ticket_type')
outlet_type = Enum(*OUTLET_TYPES, name='outlet_type')
service_category = Enum(*SERVICE_CATEGORIES, name='service_category')


class User(db.Model):
    __tablename__ = 'users'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    first_name = db.Column(db.String(50), nullable=False)
    last_name = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(20), unique=True)
    role = db.Column(user_role, nullable=False, default='employee')
    avatar = db.Column(db.String(500))
    department = db.Column(db.String(100))
    position = db.Column(db.String(100))
    hire_date = db.Column(db.DateTime)
    salary = db.Column(db.Numeric(12, 2))
    address = db.Column(db.JSON)
    preferences = db.Column(db.JSON)
    last_login = db.Column(db.DateTime)
    wallet_balance = db.Column(db.Numeric(12, 2), default=0)

    # Warehouse assignment
    warehouse_id = db.Column(Uuid, db.ForeignKey('warehouses.id'))
    warehouse_position = db.Column(db.String(50))
    warehouse_assigned_at = db.Column(db.DateTime)

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_by = db.Column(Uuid, db.ForeignKey('users.id'))
    last_updated_by = db.Column(Uuid, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=utc_now)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now)

    warehouse = relationship('Warehouse', foreign_keys=[warehouse_id])

    def set_password(self, password):
        self.password = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password, password)

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"


class Warehouse(db.Model):
    __tablename__ = 'warehouses'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = db.Column(db.String(100), nullable=False)
    code = db.Column(db.String(20), unique=True, nullable=False)
    address = db.Column(db.JSON)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=utc_now)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now)

    employees = relationship('WarehouseEmployee', back_populates='warehouse', cascade='all, delete-orphan')


class WarehouseEmployee(db.Model):
    __tablename__ = 'warehouse_employees'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    warehouse_id = db.Column(Uuid, db.ForeignKey('warehouses.id'), nullable=False)
    user_id = db.Column(Uuid, db.ForeignKey('users.id'), nullable=False)
    position = db.Column(db.String(50), default='warehouse_employee')
    assigned_by = db.Column(Uuid, db.ForeignKey('users.id'))
    assigned_at = db.Column(db.DateTime, default=utc_now)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    warehouse = relationship('Warehouse', back_populates='employees')
    user = relationship('User', foreign_keys=[user_id])


class Category(db.Model):
    __tablename__ = 'categories'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=utc_now)


class WorkshopJob(db.Model):
    __tablename__ = 'workshop_jobs'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = db.Column(db.String(200), nullable=False)
    status = db.Column(db.String(30), default='pending')
    customer_id = db.Column(Uuid, db.ForeignKey('customers.id'))
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=utc_now)


class Invoice(db.Model):
    __tablename__ = 'invoices'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    invoice_number = db.Column(db.String(50), unique=True, nullable=False)
    customer_id = db.Column(Uuid, db.ForeignKey('customers.id'))
    sales_outlet_id = db.Column(Uuid, db.ForeignKey('sales_outlets.id'))
    total = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    invoice_date = db.Column(db.DateTime, default=utc_now)
    is_pos_transaction = db.Column(db.Boolean, default=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_by = db.Column(Uuid, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=utc_now)


class Account(db.Model):
    __tablename__ = 'accounts'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = db.Column(db.String(100), nullable=False)
    code = db.Column(db.String(20), unique=True, nullable=False)
    type = db.Column(account_type, nullable=False)
    category = db.Column(db.String(50))
    parent_account_id = db.Column(Uuid, db.ForeignKey('accounts.id'))
    description = db.Column(db.Text)
    currency = db.Column(db.String(3), default='USD')
    opening_balance = db.Column(db.Numeric(14, 2), default=0)
    current_balance = db.Column(db.Numeric(14, 2), default=0)
    is_system_account = db.Column(db.Boolean, default=False)
    allow_negative_balance = db.Column(db.Boolean, default=True)
    require_approval = db.Column(db.Boolean, default=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_by = db.Column(Uuid, db.ForeignKey('users.id'))
    last_updated_by = db.Column(Uuid, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=utc_now)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now)

    parent_account = relationship('Account', remote_side=[id])
    creator = relationship('User', foreign_keys=[created_by])


class Transaction(db.Model):
    __tablename__ = 'transactions'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    transaction_number = db.Column(db.String(30), unique=True, nullable=False)
    date = db.Column(db.DateTime, nullable=False, default=utc_now)
    description = db.Column(db.Text, nullable=False)
    type = db.Column(transaction_type, nullable=False)
    reference = db.Column(db.String(100))
    amount = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    currency = db.Column(db.String(3), default='USD')
    customer_id = db.Column(Uuid, db.ForeignKey('customers.id'))
    supplier_id = db.Column(Uuid, db.ForeignKey('suppliers.id'))
    invoice_id = db.Column(Uuid, db.ForeignKey('invoices.id'))
    payment_method = db.Column(payment_method)
    bank_account = db.Column(db.JSON)
    attachments = db.Column(db.JSON, default=list)
    status = db.Column(transaction_status, nullable=False, default='draft')
    is_reconciled = db.Column(db.Boolean, default=False)
    reconciled_at = db.Column(db.DateTime)
    reconciled_by = db.Column(Uuid, db.ForeignKey('users.id'))
    notes = db.Column(db.Text)
    approved_by = db.Column(Uuid, db.ForeignKey('users.id'))
    approved_at = db.Column(db.DateTime)
    posted_at = db.Column(db.DateTime)
    extra_metadata = db.Column('metadata', db.JSON, default=dict)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_by = db.Column(Uuid, db.ForeignKey('users.id'))
    last_updated_by = db.Column(Uuid, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=utc_now)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now)

    entries = relationship('TransactionEntry', back_populates='transaction',
                           cascade='all, delete-orphan', order_by='TransactionEntry.position')
    customer = relationship('Customer')
    supplier = relationship('Supplier')
    invoice = relationship('Invoice')
    creator = relationship('User', foreign_keys=[created_by])
    approver = relationship('User', foreign_keys=[approved_by])
    reconciler = relationship('User', foreign_keys=[reconciled_by])

    @property
    def total_debit(self):
        return sum((Decimal(entry.debit or 0) for entry in self.entries), Decimal('0'))

    @property
    def total_credit(self):
        return sum((Decimal(entry.credit or 0) for entry in self.entries), Decimal('0'))

    @property
    def is_balanced(self):
        # 0.01 tolerance for rounding
        return abs(self.total_debit - self.total_credit) <= Decimal('0.01')


class TransactionEntry(db.Model):
    __tablename__ = 'transaction_entries'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    transaction_id = db.Column(Uuid, db.ForeignKey('transactions.id', ondelete='CASCADE'), nullable=False)
    account_id = db.Column(Uuid, db.ForeignKey('accounts.id'), nullable=False)
    debit = db.Column(db.Numeric(14, 2), default=0)
    credit = db.Column(db.Numeric(14, 2), default=0)
    description = db.Column(db.String(255))
    position = db.Column(db.Integer, default=0)

    transaction = relationship('Transaction', back_populates='entries')
    account = relationship('Account')


class Customer(db.Model):
    __tablename__ = 'customers'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    first_name = db.Column(db.String(50), nullable=False)
    last_name = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    phone = db.Column(db.String(20), unique=True)
    date_of_birth = db.Column(db.DateTime)
    gender = db.Column(gender_type)
    avatar = db.Column(db.String(500))
    customer_code = db.Column(db.String(20), unique=True, nullable=False)
    type = db.Column(customer_type, nullable=False, default='individual')

    # Business info
    company_name = db.Column(db.String(200))
    tax_id = db.Column(db.String(50))
    registration_number = db.Column(db.String(50))
    website = db.Column(db.String(255))

    address = db.Column(db.JSON)
    preferences = db.Column(db.JSON)
    credit_limit = db.Column(db.Numeric(14, 2), default=0)
    payment_terms = db.Column(db.Integer, default=0)
    is_verified = db.Column(db.Boolean, default=False)
    last_purchase = db.Column(db.DateTime)
    total_purchases_count = db.Column(db.Integer, default=0)
    total_purchases_amount = db.Column(db.Numeric(14, 2), default=0)
    wallet_balance = db.Column(db.Numeric(14, 2), default=0)
    notes = db.Column(db.Text)
    user_id = db.Column(Uuid, db.ForeignKey('users.id'), index=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_by = db.Column(Uuid, db.ForeignKey('users.id'))
    last_updated_by = db.Column(Uuid, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=utc_now)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now)

    user = relationship('User', foreign_keys=[user_id])
    creator = relationship('User', foreign_keys=[created_by])
    wallet_transactions = relationship('CustomerWalletTransaction', back_populates='customer',
                                       cascade='all, delete-orphan')


class CustomerWalletTransaction(db.Model):
    __tablename__ = 'customer_wallet_transactions'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    customer_id = db.Column(Uuid, db.ForeignKey('customers.id'), nullable=False)
    type = db.Column(wallet_entry_type, nullable=False)
    amount = db.Column(db.Numeric(14, 2), nullable=False)
    balance_after = db.Column(db.Numeric(14, 2), nullable=False)
    description = db.Column(db.String(255))
    reference = db.Column(db.String(100))
    created_by = db.Column(Uuid, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=utc_now)

    customer = relationship('Customer', back_populates='wallet_transactions')
    creator = relationship('User', foreign_keys=[created_by])


supplier_categories = db.Table(
    'supplier_categories',
    db.Column('supplier_id', Uuid, db.ForeignKey('suppliers.id'), primary_key=True),
    db.Column('category_id', Uuid, db.ForeignKey('categories.id'), primary_key=True)
)


class Supplier(db.Model):
    __tablename__ = 'suppliers'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = db.Column(db.String(100), nullable=False)
    code = db.Column(db.String(20), unique=True, nullable=False)

    # Contact person
    contact_first_name = db.Column(db.String(50))
    contact_last_name = db.Column(db.String(50))
    contact_email = db.Column(db.String(255))
    contact_phone = db.Column(db.String(20))

    # Business info
    company_name = db.Column(db.String(200), nullable=False)
    tax_id = db.Column(db.String(50))
    registration_number = db.Column(db.String(50))
    website = db.Column(db.String(255))

    street = db.Column(db.String(255))
    city = db.Column(db.String(100))
    state = db.Column(db.String(100))
    zip_code = db.Column(db.String(20))
    country = db.Column(db.String(100))

    payment_terms = db.Column(db.Integer, default=30)
    credit_limit = db.Column(db.Numeric(14, 2), default=0)
    currency = db.Column(db.String(3), default='USD')
    status = db.Column(supplier_status, nullable=False, default='active')
    rating = db.Column(db.Float, default=3)
    notes = db.Column(db.Text)
    total_purchases_count = db.Column(db.Integer, default=0)
    total_purchases_amount = db.Column(db.Numeric(14, 2), default=0)
    last_purchase = db.Column(db.DateTime)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_by = db.Column(Uuid, db.ForeignKey('users.id'))
    last_updated_by = db.Column(Uuid, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=utc_now)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now)

    categories = relationship('Category', secondary=supplier_categories)
    creator = relationship('User', foreign_keys=[created_by])


class Product(db.Model):
    __tablename__ = 'products'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = db.Column(db.String(200), nullable=False)
    sku = db.Column(db.String(50), unique=True, nullable=False)
    barcode = db.Column(db.String(50), unique=True)
    description = db.Column(db.Text)
    category_id = db.Column(Uuid, db.ForeignKey('categories.id'), nullable=False)
    brand = db.Column(db.String(100))
    supplier_id = db.Column(Uuid, db.ForeignKey('suppliers.id'))

    # Pricing
    cost_price = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    selling_price = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    markup = db.Column(db.Numeric(10, 2), default=0)
    discount = db.Column(db.Numeric(5, 2), default=0)
    tax_rate = db.Column(db.Numeric(5, 2), default=0)

    # Inventory
    current_stock = db.Column(db.Integer, nullable=False, default=0)
    min_stock = db.Column(db.Integer, default=0)
    max_stock = db.Column(db.Integer)
    reorder_point = db.Column(db.Integer, default=0)
    reorder_quantity = db.Column(db.Integer, default=0)

    tags = db.Column(db.JSON, default=list)
    images = db.Column(db.JSON, default=list)
    specifications = db.Column(db.JSON)
    is_digital = db.Column(db.Boolean, default=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_by = db.Column(Uuid, db.ForeignKey('users.id'))
    last_updated_by = db.Column(Uuid, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=utc_now)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now)

    category = relationship('Category')
    supplier = relationship('Supplier')
    creator = relationship('User', foreign_keys=[created_by])

    def recalculate_markup(self):
        cost = Decimal(self.cost_price or 0)
        if cost > 0:
            self.markup = ((Decimal(self.selling_price or 0) - cost) / cost * 100).quantize(Decimal('0.01'))
        else:
            self.markup = Decimal('0')


class Machine(db.Model):
    __tablename__ = 'machines'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = db.Column(db.String(100), nullable=False)
    model = db.Column(db.String(100))
    manufacturer = db.Column(db.String(100))
    serial_number = db.Column(db.String(100), unique=True)
    category = db.Column(machine_category, nullable=False)
    status = db.Column(machine_status, nullable=False, default='operational')
    location = db.Column(db.JSON)
    specifications = db.Column(db.JSON)
    purchase_info = db.Column(db.JSON)

    maintenance_schedule = db.Column(maintenance_schedule, default='monthly')
    last_maintenance = db.Column(db.DateTime)
    next_maintenance = db.Column(db.DateTime)

    # Booking
    is_available = db.Column(db.Boolean, default=True, nullable=False)
    current_job_id = db.Column(Uuid, db.ForeignKey('workshop_jobs.id'))
    booked_until = db.Column(db.DateTime)
    booked_by = db.Column(Uuid, db.ForeignKey('users.id'))

    operating_instructions = db.Column(db.Text)
    safety_requirements = db.Column(db.JSON, default=list)
    required_certifications = db.Column(db.JSON, default=list)
    notes = db.Column(db.Text)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_by = db.Column(Uuid, db.ForeignKey('users.id'))
    last_updated_by = db.Column(Uuid, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=utc_now)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now)

    current_job = relationship('WorkshopJob')
    booker = relationship('User', foreign_keys=[booked_by])
    creator = relationship('User', foreign_keys=[created_by])
    updater = relationship('User', foreign_keys=[last_updated_by])


class Tool(db.Model):
    __tablename__ = 'tools'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = db.Column(db.String(100), nullable=False)
    tool_number = db.Column(db.String(50), unique=True)
    category = db.Column(tool_category, nullable=False)
    subcategory = db.Column(db.String(100))
    brand = db.Column(db.String(100))
    model = db.Column(db.String(100))
    serial_number = db.Column(db.String(100))
    condition = db.Column(tool_condition, nullable=False, default='good')
    status = db.Column(tool_status, nullable=False, default='available')
    location = db.Column(db.JSON)
    specifications = db.Column(db.JSON)
    purchase_info = db.Column(db.JSON)

    maintenance_schedule = db.Column(maintenance_schedule, default='as_needed')
    last_maintenance = db.Column(db.DateTime)
    next_maintenance = db.Column(db.DateTime)

    # Assignment
    is_available = db.Column(db.Boolean, default=True, nullable=False)
    assigned_to = db.Column(Uuid, db.ForeignKey('users.id'))
    assigned_at = db.Column(db.DateTime)
    expected_return = db.Column(db.DateTime)
    current_job_id = db.Column(Uuid, db.ForeignKey('workshop_jobs.id'))

    # Usage
    usage_count = db.Column(db.Integer, default=0)
    total_hours = db.Column(db.Float, default=0)
    last_used = db.Column(db.DateTime)

    # Calibration
    requires_calibration = db.Column(db.Boolean, default=False)
    last_calibrated = db.Column(db.DateTime)
    next_calibration = db.Column(db.DateTime)
    calibration_interval = db.Column(db.Integer, default=365)
    calibration_certificate = db.Column(db.String(255))

    notes = db.Column(db.Text)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_by = db.Column(Uuid, db.ForeignKey('users.id'))
    last_updated_by = db.Column(Uuid, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=utc_now)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now)

    assignee = relationship('User', foreign_keys=[assigned_to])
    current_job = relationship('WorkshopJob')
    creator = relationship('User', foreign_keys=[created_by])
    updater = relationship('User', foreign_keys=[last_updated_by])


class MaintenanceRecord(db.Model):
    """Service history shared by machines and tools, keyed by resource_type + resource_id."""
    __tablename__ = 'maintenance_records'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    resource_type = db.Column(db.String(20), nullable=False)
    resource_id = db.Column(Uuid, nullable=False, index=True)
    type = db.Column(maintenance_type, nullable=False, default='preventive')
    description = db.Column(db.Text)
    performed_by = db.Column(Uuid, db.ForeignKey('users.id'))
    performed_at = db.Column(db.DateTime, default=utc_now)
    cost = db.Column(db.Numeric(12, 2), default=0)
    notes = db.Column(db.Text)
    next_maintenance_date = db.Column(db.DateTime)

    performer = relationship('User', foreign_keys=[performed_by])


class Workstation(db.Model):
    __tablename__ = 'workstations'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = db.Column(db.String(100), nullable=False)
    station_number = db.Column(db.String(50), unique=True, nullable=False)
    type = db.Column(workstation_type, nullable=False)
    status = db.Column(workstation_status, nullable=False, default='available')

    building = db.Column(db.String(100))
    floor = db.Column(db.String(50))
    section = db.Column(db.String(100))

    capacity = db.Column(db.JSON)
    equipment = db.Column(db.JSON, default=list)
    operating_hours = db.Column(db.JSON)

    # Booking
    is_available = db.Column(db.Boolean, default=True, nullable=False)
    current_job_id = db.Column(Uuid, db.ForeignKey('workshop_jobs.id'))
    booked_until = db.Column(db.DateTime)
    booked_by = db.Column(Uuid, db.ForeignKey('users.id'))

    maintenance_schedule = db.Column(maintenance_schedule, default='weekly')
    last_maintenance = db.Column(db.DateTime)
    next_maintenance = db.Column(db.DateTime)
    maintenance_notes = db.Column(db.Text)

    # Utilization
    total_hours_used = db.Column(db.Float, default=0)
    total_jobs_completed = db.Column(db.Integer, default=0)
    average_job_duration = db.Column(db.Float, default=0)
    last_used = db.Column(db.DateTime)

    hourly_rate = db.Column(db.Numeric(10, 2), default=0)
    notes = db.Column(db.Text)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_by = db.Column(Uuid, db.ForeignKey('users.id'))
    last_updated_by = db.Column(Uuid, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=utc_now)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now)

    current_job = relationship('WorkshopJob')
    booker = relationship('User', foreign_keys=[booked_by])
    creator = relationship('User', foreign_keys=[created_by])
    updater = relationship('User', foreign_keys=[last_updated_by])


class Attendance(db.Model):
    __tablename__ = 'attendance'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    employee_id = db.Column(Uuid, db.ForeignKey('users.id'), nullable=False, index=True)
    date = db.Column(db.DateTime, nullable=False, default=utc_now)

    check_in_time = db.Column(db.DateTime)
    check_in_location = db.Column(db.JSON)
    check_in_method = db.Column(db.String(20))
    check_in_notes = db.Column(db.Text)
    check_out_time = db.Column(db.DateTime)
    check_out_location = db.Column(db.JSON)
    check_out_method = db.Column(db.String(20))
    check_out_notes = db.Column(db.Text)

    total_hours = db.Column(db.Float, default=0)
    overtime = db.Column(db.Float, default=0)
    status = db.Column(attendance_status, nullable=False, default='present')
    is_approved = db.Column(db.Boolean, default=False)
    approved_by = db.Column(Uuid, db.ForeignKey('users.id'))
    approved_at = db.Column(db.DateTime)
    notes = db.Column(db.Text)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_by = db.Column(Uuid, db.ForeignKey('users.id'))
    last_updated_by = db.Column(Uuid, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=utc_now)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now)

    employee = relationship('User', foreign_keys=[employee_id])
    approver = relationship('User', foreign_keys=[approved_by])
    breaks = relationship('AttendanceBreak', back_populates='attendance',
                          cascade='all, delete-orphan', order_by='AttendanceBreak.start_time')

    def recalculate_hours(self):
        if not (self.check_in_time and self.check_out_time):
            return
        worked = (self.check_out_time - self.check_in_time).total_seconds() / 60
        worked -= sum(item.duration or 0 for item in self.breaks)
        self.total_hours = round(max(worked, 0) / 60, 2)
        self.overtime = round(max(self.total_hours - STANDARD_WORKDAY_HOURS, 0), 2)


class AttendanceBreak(db.Model):
    __tablename__ = 'attendance_breaks'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    attendance_id = db.Column(Uuid, db.ForeignKey('attendance.id', ondelete='CASCADE'), nullable=False)
    start_time = db.Column(db.DateTime, nullable=False)
    end_time = db.Column(db.DateTime)
    duration = db.Column(db.Integer)  # minutes
    type = db.Column(break_type, nullable=False, default='personal')
    notes = db.Column(db.Text)

    attendance = relationship('Attendance', back_populates='breaks')


class SupportTicket(db.Model):
    __tablename__ = 'support_tickets'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    ticket_number = db.Column(db.String(20), unique=True, nullable=False)
    subject = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    customer_id = db.Column(Uuid, db.ForeignKey('customers.id'), nullable=False)
    assigned_to = db.Column(Uuid, db.ForeignKey('users.id'))
    category = db.Column(ticket_category, nullable=False)
    priority = db.Column(priority_level, nullable=False, default='medium')
    status = db.Column(ticket_status, nullable=False, default='open')
    type = db.Column(ticket_type, nullable=False, default='customer')
    attachments = db.Column(db.JSON, default=list)
    tags = db.Column(db.JSON, default=list)

    # SLA, in hours
    sla_response_time = db.Column(db.Integer, default=24)
    sla_resolution_time = db.Column(db.Integer, default=72)
    first_response_at = db.Column(db.DateTime)
    resolved_at = db.Column(db.DateTime)
    closed_at = db.Column(db.DateTime)

    satisfaction_rating = db.Column(db.Float)
    satisfaction_feedback = db.Column(db.Text)
    rated_at = db.Column(db.DateTime)

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_by = db.Column(Uuid, db.ForeignKey('users.id'))
    last_updated_by = db.Column(Uuid, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=utc_now)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now)

    customer = relationship('Customer')
    assignee = relationship('User', foreign_keys=[assigned_to])
    creator = relationship('User', foreign_keys=[created_by])
    conversations = relationship('TicketConversation', back_populates='ticket',
                                 cascade='all, delete-orphan', order_by='TicketConversation.created_at')


class TicketConversation(db.Model):
    __tablename__ = 'ticket_conversations'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    ticket_id = db.Column(Uuid, db.ForeignKey('support_tickets.id', ondelete='CASCADE'), nullable=False)
    user_id = db.Column(Uuid, db.ForeignKey('users.id'), nullable=False)
    message = db.Column(db.Text, nullable=False)
    is_internal = db.Column(db.Boolean, default=False)
    attachments = db.Column(db.JSON, default=list)
    created_at = db.Column(db.DateTime, default=utc_now)

    ticket = relationship('SupportTicket', back_populates='conversations')
    user = relationship('User')


class Setting(db.Model):
    __tablename__ = 'settings'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    company = db.Column(db.JSON, nullable=False, default=dict)
    appearance = db.Column(db.JSON, nullable=False, default=dict)
    notifications = db.Column(db.JSON, nullable=False, default=dict)
    system = db.Column(db.JSON, nullable=False, default=dict)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    last_updated_by = db.Column(Uuid, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=utc_now)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now)


class SalesOutlet(db.Model):
    __tablename__ = 'sales_outlets'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    outlet_code = db.Column(db.String(20), unique=True, nullable=False)
    name = db.Column(db.String(100), nullable=False)
    type = db.Column(outlet_type, nullable=False, default='retail')
    description = db.Column(db.Text)

    street = db.Column(db.String(255))
    city = db.Column(db.String(100))
    state = db.Column(db.String(100))
    zip_code = db.Column(db.String(20))
    country = db.Column(db.String(100))

    contact = db.Column(db.JSON)
    warehouse_id = db.Column(Uuid, db.ForeignKey('warehouses.id'))
    manager_id = db.Column(Uuid, db.ForeignKey('users.id'))
    operating_hours = db.Column(db.JSON)
    settings = db.Column(db.JSON)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_by = db.Column(Uuid, db.ForeignKey('users.id'))
    last_updated_by = db.Column(Uuid, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=utc_now)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now)

    warehouse = relationship('Warehouse')
    manager = relationship('User', foreign_keys=[manager_id])
    creator = relationship('User', foreign_keys=[created_by])


class ServiceTemplate(db.Model):
    __tablename__ = 'service_templates'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    category = db.Column(service_category, nullable=False)
    estimated_duration = db.Column(db.Integer, nullable=False)  # minutes
    estimated_cost = db.Column(db.Numeric(12, 2), default=0)
    priority = db.Column(priority_level, nullable=False, default='medium')
    required_tools = db.Column(db.JSON, default=list)
    required_parts = db.Column(db.JSON, default=list)
    tasks = db.Column(db.JSON, default=list)
    notes = db.Column(db.Text)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_by = db.Column(Uuid, db.ForeignKey('users.id'))
    last_updated_by = db.Column(Uuid, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=utc_now)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now)

    creator = relationship('User', foreign_keys=[created_by])
    updater = relationship('User', foreign_keys=[last_updated_by])


class DetailedLog(db.Model):
    __tablename__ = 'detailed_logs'
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = db.Column(Uuid, db.ForeignKey('users.id'))
    action = db.Column(db.String(50), nullable=False)
    table_name = db.Column(db.String(50), nullable=False)
    record_id = db.Column(db.String(64))
    old_values = db.Column(db.JSON)
    new_values = db.Column(db.JSON)
    ip_address = db.Column(db.String(45))
    user_agent = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, default=utc_now)

    user = relationship('User', foreign_keys=[user_id])
