import logging

import rowbind
import pytest
from testcontainers.postgres import PostgresContainer

logger = logging.getLogger(__name__)

SCHEMA = [
    """
create table customers (
    id serial primary key,
    name varchar(255),
    email varchar(255),
    created timestamp,
    updated timestamp
)
""",
    """
create table cars (
    vin varchar(17) not null primary key,
    color varchar(20),
    make varchar(50),
    model varchar(50)
)
""",
    """
create table accounts (
    id serial primary key,
    user_name text not null,
    active boolean,
    score double precision,
    avatar bytea,
    status text default 'pending'
)
""",
    """
create table products (
    id serial primary key,
    name text,
    price integer
)
""",
]

TABLES = ['customers', 'cars', 'accounts', 'products']


@pytest.fixture(scope='session')
def psql_docker(request):
    """Session-scoped PostgreSQL container using testcontainers.

    Tests depending on it are skipped when no container runtime is reachable.
    """
    try:
        container = PostgresContainer(
            image='postgres:16',
            username='postgres',
            password='postgres',
            dbname='test_db',
        )
        container.start()
    except Exception as e:
        pytest.skip(f'PostgreSQL container unavailable: {e}')

    logger.info(
        f'PostgreSQL container started at '
        f'{container.get_container_host_ip()}:{container.get_exposed_port(5432)}'
    )

    def finalizer():
        try:
            container.stop()
            logger.info('PostgreSQL container stopped')
        except Exception as e:
            logger.warning(f'Error stopping container: {e}')

    request.addfinalizer(finalizer)
    return container


@pytest.fixture
def pg_options(psql_docker):
    return {
        'drivername': 'postgresql',
        'hostname': psql_docker.get_container_host_ip(),
        'username': 'postgres',
        'password': 'postgres',
        'database': 'test_db',
        'port': int(psql_docker.get_exposed_port(5432)),
        'timeout': 30,
    }


@pytest.fixture
def pg_conn(pg_options):
    """
    Connection fixture with function scope for clean tests.
    Each test gets a fresh connection with freshly created tables.
    """
    cn = rowbind.connect(pg_options)
    for table in TABLES:
        rowbind.write_only(cn, f'drop table if exists {table}')
    for ddl in SCHEMA:
        rowbind.write_only(cn, ddl)

    yield cn
    cn.close()
