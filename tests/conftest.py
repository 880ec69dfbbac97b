from __future__ import annotations

import pytest

from duecal.data.db.autopay_state_repo import AutopayStateRepo
from duecal.data.db.db_helper import DbHelper


@pytest.fixture
def db_helper():
    helper = DbHelper(":memory:")
    helper.init_schema_if_needed()
    yield helper
    helper.close()


@pytest.fixture
def state_repo(db_helper) -> AutopayStateRepo:
    return AutopayStateRepo(db_helper.get_connection())
