import os
import configparser
import urllib.parse
from pathlib import Path

ENV_PREFIX = 'FULFILLMENT_'

# Written to settings.ini on first start; also the fallback for missing keys
DEFAULT_SETTINGS = {
    'DATABASE': {
        'engine': 'sqlite',
        'host': 'localhost',
        'port': '5432',
        'database': 'fulfillment_network.db',
        'username': 'postgres',
        'password': 'postgres',
        'echo': 'False',
        'pool_size': '10',
        'max_overflow': '20',
        'pool_timeout': '30',
        'pool_recycle': '1800'
    },
    'LOGGING': {
        'level': 'INFO',
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        'directory': 'logs',
        'max_size_mb': '10',
        'backup_count': '5',
        'console_output': 'True'
    },
    'BUSINESS_RULES': {
        'max_warehouses_per_product_per_store': '2',
        'max_warehouses_per_store': '3',
        'max_products_per_warehouse': '5'
    },
    'LEGACY': {
        'notifications_enabled': 'True'
    }
}


class Config:
    """Configuration manager for the Fulfillment Network.

    Values resolve in this order: an environment variable named
    ``FULFILLMENT_<SECTION>_<KEY>``, then ``settings.ini`` in the directory
    given by ``FULFILLMENT_CONFIG_DIR`` (default ``config``), then
    ``DEFAULT_SETTINGS``.
    """

    _instance = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Load settings once per process."""
        if self._initialized:
            return

        self._config_dir = Path(os.environ.get(f'{ENV_PREFIX}CONFIG_DIR', 'config'))
        self._config_path = self._config_dir / 'settings.ini'

        self._config = configparser.ConfigParser(interpolation=None)
        self._config.read_dict(DEFAULT_SETTINGS)

        if self._config_path.exists():
            self._config.read(self._config_path)
        else:
            self._write_defaults()

        self._initialized = True

    def _write_defaults(self):
        self._config_dir.mkdir(parents=True, exist_ok=True)
        with open(self._config_path, 'w') as configfile:
            self._config.write(configfile)

    def get(self, section, key, default=None):
        """Get a raw string value, honouring environment overrides."""
        env_value = os.environ.get(f'{ENV_PREFIX}{section}_{key}'.upper())
        if env_value is not None:
            return env_value
        return self._config.get(section, key, fallback=default)

    def get_int(self, section, key, default=None):
        return self._typed(section, key, default, int)

    def get_boolean(self, section, key, default=None):
        return self._typed(section, key, default, self._to_bool)

    def _typed(self, section, key, default, convert):
        value = self.get(section, key)
        if value is None:
            return default
        try:
            return convert(value)
        except ValueError:
            return default

    @staticmethod
    def _to_bool(value):
        lowered = value.strip().lower()
        if lowered not in configparser.ConfigParser.BOOLEAN_STATES:
            raise ValueError(f"Not a boolean: {value}")
        return configparser.ConfigParser.BOOLEAN_STATES[lowered]

    @property
    def database_url(self):
        """SQLAlchemy URL for the configured database.

        ``FULFILLMENT_DATABASE_URL`` replaces the URL built from the
        DATABASE section.
        """
        override = os.environ.get(f'{ENV_PREFIX}DATABASE_URL')
        if override:
            return override

        engine = self.get('DATABASE', 'engine', 'sqlite')
        database = self.get('DATABASE', 'database', 'fulfillment_network.db')

        if engine.startswith('sqlite'):
            return f"{engine}:///{database}"

        username = self.get('DATABASE', 'username', 'postgres')
        # Special characters in the password would break the URL
        password = urllib.parse.quote_plus(self.get('DATABASE', 'password', ''))
        host = self.get('DATABASE', 'host', 'localhost')
        port = self.get('DATABASE', 'port', '5432')

        return f"{engine}://{username}:{password}@{host}:{port}/{database}"

    @property
    def pool_options(self):
        """Connection pool settings for server databases."""
        return {
            'pool_size': self.get_int('DATABASE', 'pool_size', 10),
            'max_overflow': self.get_int('DATABASE', 'max_overflow', 20),
            'pool_timeout': self.get_int('DATABASE', 'pool_timeout', 30),
            'pool_recycle': self.get_int('DATABASE', 'pool_recycle', 1800)
        }

    @property
    def log_config(self):
        """Get logging configuration."""
        return {
            'level': self.get('LOGGING', 'level', 'INFO'),
            'format': self.get('LOGGING', 'format'),
            'directory': self.get('LOGGING', 'directory', 'logs'),
            'max_size_mb': self.get_int('LOGGING', 'max_size_mb', 10),
            'backup_count': self.get_int('LOGGING', 'backup_count', 5),
            'console_output': self.get_boolean('LOGGING', 'console_output', True)
        }

    @property
    def business_rules(self):
        """Fulfillment cardinality limits."""
        return {
            key: self.get_int('BUSINESS_RULES', key, int(default))
            for key, default in DEFAULT_SETTINGS['BUSINESS_RULES'].items()
        }

    @property
    def legacy_notifications_enabled(self):
        """Whether store changes are forwarded to the legacy store manager."""
        return self.get_boolean('LEGACY', 'notifications_enabled', True)

# Global config instance
config = Config()
