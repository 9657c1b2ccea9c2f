"""Generable schema for the on-device assistant turn.

Imported only once ``apple_fm_sdk`` is known to be installed.
"""

import builtins
from typing import List, Optional

import apple_fm_sdk as fm


@fm.generable()
class NBGeneratedAction:
    command: str = fm.guide(description="Action requested by the user")
    # Field name matches the reply JSON key; annotation avoids the shadowed builtin.
    bool: Optional[builtins.bool] = fm.guide(description="Dark mode target for setDarkMode")


@fm.generable()
class NBGeneratedTurn:
    reply: str = fm.guide(description="A reply string to show to the user")
    action: Optional[NBGeneratedAction] = fm.guide(description="Optional action")
    searchResults: Optional[List[str]] = fm.guide(description="Short list of relevant results")
