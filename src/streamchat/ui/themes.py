"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Theme variables (borders, scrollbars, etc.)

To add a new theme, define it here and register in the app.
"""

from textual.theme import Theme

# Dark theme with a teal primary and amber accents
STREAMCHAT_NIGHT = Theme(
    name="streamchat-night",
    primary="#5fb3b3",      # Teal - main accent
    secondary="#c594c5",    # Lilac - assistant messages
    accent="#fac863",       # Amber - highlights
    foreground="#d8dee9",
    background="#1b2b34",
    success="#99c794",      # Green - user messages
    warning="#f99157",      # Orange - streaming state
    error="#ec5f67",
    surface="#223440",
    panel="#1f303b",
    dark=True,
    variables={
        "block-cursor-foreground": "#1b2b34",
        "block-cursor-background": "#d8dee9",
        "block-cursor-text-style": "bold",
        "block-hover-background": "#343d46 30%",

        "input-cursor-background": "#d8dee9",
        "input-cursor-foreground": "#1b2b34",
        "input-selection-background": "#5fb3b3 30%",

        "border": "#4f5b66",
        "border-blurred": "#343d46",

        "scrollbar": "#343d46",
        "scrollbar-hover": "#4f5b66",
        "scrollbar-active": "#5fb3b3",
        "scrollbar-background": "#1f303b",

        "footer-foreground": "#c0c5ce",
        "footer-background": "#1b2b34",
        "footer-key-foreground": "#fac863",
        "footer-key-background": "#343d46",

        "text-muted": "#65737e",
        "text-disabled": "#4f5b66",
    },
)
