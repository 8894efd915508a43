"""
View models for the task list.

- list_view.py: filtered, word-wrapped, scroll-positioned window
- navigation.py: selection state machine + TaskBoard controller
- columns.py: reminder/category/date column text
"""
