from .token import Token, TokenData
from .user import (
    UserBase,
    UserCreate,
    UserUpdate,
    User,
    UserWithChildren
)
from .commission_config import (
    CommissionConfigBase,
    CommissionConfigCreate,
    CommissionConfigUpdate,
    CommissionConfig as CommissionConfigSchema # Alias to avoid clash with the CommissionConfig model
)
from .commission import (
    CommissionBase,
    CommissionCreate,
    CommissionShare,
    Commission as CommissionSchema, # Alias to avoid clash if Commission model is also imported directly
    CommissionNestedUser,
    MarkPaidRequest,
    MarkPaidResponse,
    CommissionRunResult
)
from .commission_issue import CommissionIssue as CommissionIssueSchema
from .hierarchy import HierarchyParticipant
from .stats import CommissionStats, ServiceTypeBreakdown
from .transaction import CompletedTransaction
