from src.staffing_workflow.staffing_workflow.container import build_container
from src.staffing_workflow.staffing_workflow.notifications.publisher import InMemoryChannelHub


def db_config(database):
    return {"host": "db", "port": 3306, "user": "app", "password": "secret", "database": database}


def test_each_container_uses_its_own_database_config():
    first = build_container(db_config=db_config("staffing"))
    second = build_container(db_config=db_config("staffing_test"))

    assert first.users_repo._conn_factory._config.database == "staffing"
    assert second.users_repo._conn_factory._config.database == "staffing_test"
    assert second.timesheets_repo._conn_factory is second.users_repo._conn_factory
    assert first.users_repo._conn_factory is not second.users_repo._conn_factory


def test_without_relay_url_events_stay_in_process():
    container = build_container(db_config=db_config("staffing"))

    assert isinstance(container.publisher, InMemoryChannelHub)
