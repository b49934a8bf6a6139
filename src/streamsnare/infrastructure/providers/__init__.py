from .builtin import BUILTIN_PROVIDERS, CRICWATCH, FILMEX, TOTALSPORTEK, VIDLINK
from .registry import ProviderRegistry, build_upstream_url

__all__ = [
    "BUILTIN_PROVIDERS",
    "CRICWATCH",
    "FILMEX",
    "TOTALSPORTEK",
    "VIDLINK",
    "ProviderRegistry",
    "build_upstream_url",
]
