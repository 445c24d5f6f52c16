"""Common literal values used across softwart_pages.

These constants keep filenames, delimiters, and defaults centralized so the
loader, scanner, generators, and tests can import the same values without
drifting. Intended for internal use within the softwart_pages package.

Examples
--------
>>> from softwart_pages import _constants
>>> _constants.CONFIG_FILENAME
'_config.yml'
>>> _constants.PERMALINK_STYLES["pretty"]
'/:categories/:year/:month/:day/:title/'
"""

CONFIG_FILENAME = "_config.yml"
DEFAULT_DESTINATION = "_site"
LAYOUTS_DIR = "_layouts"
INCLUDES_DIR = "_includes"
POSTS_DIR = "_posts"
DRAFTS_DIR = "_drafts"

FRONT_MATTER_MARKER = "---"
FRONT_MATTER_END_MARKERS = ("---", "...")

SITEMAP_FILENAME = "sitemap.xml"
DEFAULT_FEED_PATH = "feed.xml"
DEFAULT_FEED_POSTS_LIMIT = 10

DEFAULT_MARKDOWN_EXT = ("markdown", "mkdown", "mkdn", "mkd", "md")

PERMALINK_STYLES: dict[str, str] = {
    "date": "/:categories/:year/:month/:day/:title:output_ext",
    "pretty": "/:categories/:year/:month/:day/:title/",
    "ordinal": "/:categories/:year/:y_day/:title:output_ext",
    "none": "/:categories/:title:output_ext",
}
DEFAULT_PERMALINK = PERMALINK_STYLES["date"]
PAGE_PERMALINK = "/:path:output_ext"
