from decimal import Decimal

# User types, one per commission tier
ADMIN = "admin"
BRANCH_MANAGER = "branch_manager"
TALUK_MANAGER = "taluk_manager"
SERVICE_AGENT = "service_agent"
REGISTERED_USER = "registered_user"

USER_TYPES = (ADMIN, BRANCH_MANAGER, TALUK_MANAGER, SERVICE_AGENT, REGISTERED_USER)

# Management tiers from the bottom of the hierarchy to the root
MANAGEMENT_TIER_RANK = {
    SERVICE_AGENT: 1,
    TALUK_MANAGER: 2,
    BRANCH_MANAGER: 3,
    ADMIN: 4,
}

# Tier -> CommissionConfig column holding its percentage
TIER_PERCENTAGE_FIELDS = {
    ADMIN: "admin_commission",
    BRANCH_MANAGER: "branch_manager_commission",
    TALUK_MANAGER: "taluk_manager_commission",
    SERVICE_AGENT: "service_agent_commission",
    REGISTERED_USER: "registered_user_commission",
}

# Ledger statuses
COMMISSION_STATUS_PENDING = "pending"
COMMISSION_STATUS_PAID = "paid"

# Operator queue statuses
ISSUE_STATUS_OPEN = "open"
ISSUE_STATUS_RESOLVED = "resolved"

# Seeded for every primary service type that has no config yet
DEFAULT_SERVICE_TYPES = ("recharge", "booking", "grocery", "travel", "rental", "taxi", "delivery")
DEFAULT_COMMISSION_RATES = {
    ADMIN: Decimal("0.5"),
    BRANCH_MANAGER: Decimal("0.5"),
    TALUK_MANAGER: Decimal("1.0"),
    SERVICE_AGENT: Decimal("3.0"),
    REGISTERED_USER: Decimal("1.0"),
}

TWOPLACES = Decimal("0.01")
