from __future__ import annotations

from loanflow.crud.base import BaseCRUD
from loanflow.models.user import User


user_crud: BaseCRUD[User, dict, dict] = BaseCRUD(User)
