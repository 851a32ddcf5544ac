import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple

from tradetracker.settings import MAINNET_URL, TESTNET_URL, Defaults, EnvVars
from tradetracker.utils import mask_secret


def _parse_denylist(value: Optional[str]) -> Tuple[str, ...]:
    if value is None:
        return Defaults.SYMBOL_DENYLIST
    return tuple(sym.strip().upper() for sym in value.split(',') if sym.strip())


@dataclass(frozen=True)
class ProxyConfig(object):
    """Process-wide settings for talking to the exchange. Built once from the environment and
    passed explicitly to everything that needs credentials.
    """
    api_key: Optional[str] = field(default=None, repr=False)
    api_secret: Optional[str] = field(default=None, repr=False)
    use_testnet: bool = False
    symbol_denylist: Tuple[str, ...] = Defaults.SYMBOL_DENYLIST
    public_dir: Path = Path(Defaults.PUBLIC_DIR)
    sync_clock: bool = True

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = None) -> 'ProxyConfig':
        env = os.environ if environ is None else environ
        return cls(
            api_key=env.get(EnvVars.API_KEY) or None,
            api_secret=env.get(EnvVars.SECRET_KEY) or None,
            use_testnet=env.get(EnvVars.USE_TESTNET) == 'true',
            symbol_denylist=_parse_denylist(env.get(EnvVars.DENYLIST)),
            public_dir=Path(env.get(EnvVars.PUBLIC_DIR) or Defaults.PUBLIC_DIR).resolve(),
            sync_clock=env.get(EnvVars.SYNC_CLOCK, 'true').lower() != 'false',
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.api_secret)

    @property
    def base_url(self) -> str:
        return TESTNET_URL if self.use_testnet else MAINNET_URL

    @property
    def masked_key(self) -> str:
        return mask_secret(self.api_key)

    def summary(self) -> dict:
        """Public view of the configuration, safe to hand to the dashboard."""
        return {'hasConfig': self.has_credentials, 'useTestnet': self.use_testnet}
