"""Constants and configuration for the extractly dashboard."""

class DashboardConstants:
    """Central configuration constants for the dashboard core."""

    # List views
    KEY_POINTS_PAGE_SIZE = 5  # Rows per page in the key points table
    HISTORY_PAGE_SIZE = 5  # Rows per page in the extraction history
    MIN_PAGE_SIZE = 1
    MAX_PAGE_SIZE = 100

    # Deferred delete
    DELETE_GRACE_DELAY_MS = 350  # Removal animation length before a row is spliced out

    # History previews
    SUMMARY_PREVIEW_CHARS = 300  # Summary characters shown per history row

    # Export file names
    SUMMARY_EXPORT_FILENAME = "extracted-summary.pdf"
    HISTORY_EXPORT_FILENAME = "all-extracted-content.pdf"

    # Export titles
    SUMMARY_EXPORT_TITLE = "Extractly: AI-powered Content Extractor"
    HISTORY_EXPORT_TITLE = "All Extracted Content"
    SUMMARY_HEADING = "Summary:"
    KEY_POINTS_HEADING = "Key Points:"

    # Settings keys
    KEY_POINTS_LIST = "key_points"
    HISTORY_LIST = "history"

    # Status messages
    NO_ROWS_MESSAGE = "No key points found."
    NO_RESULTS_MESSAGE = "No results found."
    NO_HISTORY_MESSAGE = "No extracted content yet."
