"""
Package catalog and platform restriction keys.

BROWSERS are suspended (greyed out, still visible in the launcher).
NUCLEAR_BLACKLIST apps are hidden completely. RESIDUAL_BROWSERS are the
alternative browsers the content filter hides when they are installed,
leaving the managed browser as the only one usable.
"""

from typing import Any, Iterable

# packageName -> friendly display name
BROWSERS: dict[str, str] = {
    "com.opera.browser": "Opera Browser",
    "com.opera.browser.preinstall": "Opera Browser (Pre-installed)",
    "org.mozilla.firefox": "Firefox",
    "com.microsoft.teams": "Microsoft Edge",
    "com.microsoft.launcher": "Microsoft Edge (Launcher)",
    "com.duckduckgo.android.core": "DuckDuckGo Browser",
    "com.brave.browser": "Brave Browser",
    "com.google.android.apps.chrome": "Chrome (duplicate check)",
    "com.sec.android.app.samsunginternet": "Samsung Internet",
}

NUCLEAR_BLACKLIST: dict[str, str] = {
    "org.telegram.messenger": "Telegram",
    "com.reddit.client": "Reddit",
    "com.twitter.android": "X (Twitter)",
    "com.discord": "Discord",
}

ALL_BLOCKED: frozenset[str] = frozenset(BROWSERS) | frozenset(NUCLEAR_BLACKLIST)

RESIDUAL_BROWSERS: tuple[str, ...] = (
    "org.mozilla.firefox",
    "com.opera.browser",
    "com.opera.mini.native",
    "com.brave.browser",
    "com.microsoft.emmx",
    "com.duckduckgo.mobile.android",
    "org.mozilla.focus",
    "com.vivaldi.browser",
    "com.sec.android.app.sbrowser",
    "com.UCMobile.intl",
    "com.kiwibrowser.browser",
    "com.jamal_nasser.browser",
    "us.spotco.fennec_dos",
    "org.torproject.torbrowser",
    "com.ghostery.android.ghostery",
    "com.ecosia.android",
    "com.cloudmosa.puffinFree",
    "acr.browser.lightning",
    "acr.browser.barebones",
)

# Everything activation may hide; teardown unhides all of it.
ALWAYS_HIDDEN: tuple[str, ...] = tuple(NUCLEAR_BLACKLIST) + tuple(
    p for p in RESIDUAL_BROWSERS if p not in NUCLEAR_BLACKLIST
)

# Managed browser configuration (Chrome enterprise policy names).
MANAGED_BROWSER_POLICY: dict[str, Any] = {
    "IncognitoModeAvailability": False,
    "ForceSafeSearch": True,
    "ForceYouTubeRestrict": 2,  # strict
    "ExtensionInstallBlacklist": ["*"],
    "DeveloperToolsDisabled": True,
    "DnsOverHttpsMode": "off",
    "HomepageLocation": "https://www.google.com",
    "HomepageIsNewTabPage": False,
    "PasswordManagerEnabled": False,
}

# User restriction keys
DISALLOW_FACTORY_RESET = "no_factory_reset"
DISALLOW_DEBUGGING_FEATURES = "no_debugging_features"
DISALLOW_SAFE_BOOT = "no_safe_boot"
DISALLOW_ADD_USER = "no_add_user"
DISALLOW_INSTALL_UNKNOWN_SOURCES = "no_install_unknown_sources"
DISALLOW_CONFIG_PRIVATE_DNS = "disallow_config_private_dns"

BEHAVIOURAL_RESTRICTIONS: tuple[str, ...] = (
    DISALLOW_FACTORY_RESET,
    DISALLOW_DEBUGGING_FEATURES,
    DISALLOW_SAFE_BOOT,
    DISALLOW_ADD_USER,
    DISALLOW_INSTALL_UNKNOWN_SOURCES,
)

# Private DNS modes
PRIVATE_DNS_MODE_OPPORTUNISTIC = "opportunistic"
PRIVATE_DNS_MODE_HOSTNAME = "hostname"


def friendly_name(package_name: str) -> str:
    """Display name for a known package, or the package name itself."""
    return BROWSERS.get(package_name) or NUCLEAR_BLACKLIST.get(package_name) or package_name


def is_nuclear(package_name: str) -> bool:
    return package_name in NUCLEAR_BLACKLIST


def nuclear_subset(packages: Iterable[str]) -> list[str]:
    """Packages from ``packages`` that get hidden, in stable order."""
    return sorted(p for p in set(packages) if p in NUCLEAR_BLACKLIST)


def browser_subset(packages: Iterable[str]) -> list[str]:
    """Browsers from ``packages`` that get suspended. Never overlaps the hidden set."""
    return sorted(p for p in set(packages) if p in BROWSERS and p not in NUCLEAR_BLACKLIST)
