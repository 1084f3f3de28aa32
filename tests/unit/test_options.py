import pytest
from rowbind import DatabaseOptions, ValidationError
from rowbind.options import load_options


def test_init_defaults():
    """Test default initialization"""
    options = DatabaseOptions(
        hostname='testhost',
        username='testuser',
        password='testpass',
        database='testdb',
        port=1234,
        timeout=30
    )

    assert options.drivername == 'postgresql'
    assert options.autocommit is True

    assert options.use_pool is False
    assert options.pool_max_connections == 5
    assert options.pool_max_idle_time == 300
    assert options.pool_wait_timeout == 30


def test_pooling_options():
    """Test connection pooling options"""
    options = DatabaseOptions(
        drivername='postgresql',
        hostname='testhost',
        username='testuser',
        password='testpass',
        database='testdb',
        port=1234,
        timeout=30,
        use_pool=True,
        pool_max_connections=10,
        pool_max_idle_time=600,
        pool_wait_timeout=60
    )

    assert options.use_pool is True
    assert options.pool_max_connections == 10
    assert options.pool_max_idle_time == 600
    assert options.pool_wait_timeout == 60


def test_validation():
    """Test validation rules"""
    with pytest.raises(ValueError):
        DatabaseOptions(
            drivername='invalid',
            hostname='testhost',
            username='testuser',
            password='testpass',
            database='testdb',
            port=1234,
            timeout=30
        )

    with pytest.raises(ValidationError, match='field port cannot be None or 0'):
        DatabaseOptions(
            hostname='testhost',
            username='testuser',
            password='testpass',
            database='testdb',
        )


def test_sqlite_needs_only_database():
    """SQLite requires a database path and nothing else"""
    options = DatabaseOptions(drivername='sqlite', database=':memory:')
    assert options.hostname is None

    with pytest.raises(ValidationError, match='field database'):
        DatabaseOptions(drivername='sqlite')


def test_str_hides_password():
    """Password never appears in the string form"""
    options = DatabaseOptions(
        hostname='testhost',
        username='testuser',
        password='hunter2',
        database='testdb',
        port=1234,
    )
    assert 'hunter2' not in str(options)
    assert "hostname='testhost'" in str(options)


class TestLoadOptions:

    def test_from_dict(self):
        options = load_options({'drivername': 'sqlite', 'database': ':memory:'})
        assert options == DatabaseOptions(drivername='sqlite', database=':memory:')

    def test_from_keywords(self):
        options = load_options(drivername='sqlite', database=':memory:', autocommit=False)
        assert options.autocommit is False

    def test_keywords_override(self):
        base = DatabaseOptions(drivername='sqlite', database='a.db')
        options = load_options(base, database='b.db')
        assert options.database == 'b.db'
        assert base.database == 'a.db'

    def test_instance_passes_through(self):
        base = DatabaseOptions(drivername='sqlite', database='a.db')
        assert load_options(base) is base

    def test_unknown_option(self):
        with pytest.raises(ValidationError, match='Unknown options'):
            load_options({'drivername': 'sqlite', 'database': 'a.db', 'appname': 'x'})
