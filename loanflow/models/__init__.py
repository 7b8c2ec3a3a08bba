# Import models here so Alembic can discover them via metadata
from .base import Base  # noqa: F401
from .user import User  # noqa: F401
from .loan_application import LoanApplication  # noqa: F401
from .approval_workflow import ApprovalWorkflow  # noqa: F401
from .workflow_log import WorkflowLog  # noqa: F401
from .notification import Notification  # noqa: F401
