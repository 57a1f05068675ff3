import pytest
from sqlalchemy import create_engine

from app_utils import storage


@pytest.fixture
def eng(tmp_path):
    e = create_engine(f"sqlite:///{tmp_path / 'habit_tree.db'}", echo=False)
    storage.init_db(e)
    yield e
    e.dispose()
