# Import all models here so Base.metadata knows every table before create_all
from app.db.base_class import Base # noqa: F401
from app.models.user import User # noqa: F401
from app.models.commission_config import CommissionConfig # noqa: F401
from app.models.commission import Commission # noqa: F401
from app.models.commission_issue import CommissionIssue # noqa: F401
