"""
Rust Compliance Scanner: Visual Telemetry Constants
"""

VERSION: str = "0.4.0"
TOOL_NAME: str = "rust-compliance"

# Banner: rich markup, rendered by the telemetry console
_SCANNER_ART: str = r"""
   ___  __  _____________    ______________  ___  __   _______   _  _________
  / _ \/ / / / __/_  __/___ / ___/ __ \/  |/  / / /  /  _/ _ | / |/ / ___/ __/
 / , _/ /_/ /\ \  / / /___// /__/ /_/ / /|_/ / /__/ _/ // __ |/    / /__/ _/
/_/|_|\____/___/ /_/       \___/\____/_/  /_/____/___/_/ |_/_/|_/\___/___/
"""
SCANNER_BANNER: str = f"[bold dark_orange]{_SCANNER_ART}[/bold dark_orange]"

FULL_COMPLIANCE_MESSAGE: str = "All files are compliant with the configured Rust standards."
