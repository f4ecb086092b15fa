"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Uses Textual CSS features: nesting, pseudo-classes, variables.

Layout: conversation sidebar on the left, chat pane on the right, the
input bar across the bottom and the debug log docked above it.
"""

APP_CSS = """
/* ============================================
   Main Screen Layout - Sidebar + Chat
   ============================================ */
Screen {
    layout: grid;
    grid-size: 2 2;
    grid-columns: 32 1fr;
    grid-rows: 1fr auto;
    background: $background;
}

/* ============================================
   Conversation Sidebar
   ============================================ */
#conversation-list {
    height: 100%;
    background: $panel;
    border: round $secondary 60%;
    border-title-color: $secondary;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0;

    &:focus {
        border: round $secondary;
    }

    & > ConversationItem {
        padding: 0 1;
        height: 1;
    }

    & > ConversationItem.-highlight {
        background: $primary 25%;
        text-style: bold;
    }
}

/* ============================================
   Chat Pane
   ============================================ */
#chat-pane {
    height: 100%;
}

#chat-history {
    height: 1fr;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus-within {
        border: round $primary;
    }
}

/* ============================================
   Debug/Log Panel
   ============================================ */
#debug-panel {
    height: auto;
    min-height: 6;
    max-height: 12;
    background: $panel;
    border: round $warning 60%;
    border-title-color: $warning;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    overflow-y: scroll;
    overflow-x: auto;
}

/* ============================================
   Chat Input Bar - Text Entry + Send
   ============================================ */
ChatInputBar {
    column-span: 2;
    height: 5;
    border: round $primary 60%;
    background: $panel;

    &:focus-within {
        border: round $primary;
    }
}

#chat-input {
    width: 1fr;
    height: 100%;
    border: none;
    padding: 0 1;
    background: transparent;
}

#send-btn {
    width: 10;
    height: 100%;
    margin: 0 0 0 1;
    border: tall $success;
    background: $success;
    color: $background;
    text-style: bold;

    &:hover {
        background: $success-lighten-1;
    }
}

/* ============================================
   Chat Messages
   ============================================ */
MessageView {
    width: 100%;
    height: auto;
    margin: 0 0 1 0;
    padding: 0 1;
    background: transparent;
}

MessageView.user-message {
    border-left: tall $success;
    background: $success 8%;

    & .message-header {
        color: $success;
        text-style: bold;
    }
}

MessageView.assistant-message {
    border-left: tall $secondary;
    background: $secondary 8%;

    & .message-header {
        color: $secondary;
        text-style: bold;
    }
}

/* Reply still being generated */
MessageView.-streaming {
    border-left: tall $warning;
}

.message-header {
    height: auto;
}

.message-body {
    height: auto;
}

/* ============================================
   Footer - Keyboard Shortcuts
   ============================================ */
Footer {
    background: $panel;
}

* {
    scrollbar-background: $panel;
    scrollbar-color: $surface-lighten-1;
    scrollbar-color-hover: $primary 50%;
    scrollbar-color-active: $primary;
    scrollbar-size: 1 1;
}
"""
