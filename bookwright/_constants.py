"""Common literal values used across bookwright.

These constants keep the source layout, manifest filenames, and runtime
navigator tuning centralized so templates, assemblers, and tests can import
the same values without drifting. Intended for internal use within the
bookwright package.

Examples
--------
>>> from bookwright import _constants
>>> _constants.BUNDLE_MANIFEST
'Book.txt'
>>> _constants.CHAPTER_SUFFIXES
('.md', '.markdown')
"""

CHAPTERS_DIR = "src/chapters"
METADATA_FILE = "src/metadata/book.yaml"
IMAGES_DIR = "src/images"

WEB_OUTPUT_DIR = "docs"
DIST_OUTPUT_DIR = "dist"
EBOOK_OUTPUT_DIR = "build/kindle"
BUNDLE_OUTPUT_DIR = "manuscript"

CHAPTER_SUFFIXES = (".md", ".markdown")

BUNDLE_MANIFEST = "Book.txt"
BUNDLE_SAMPLE = "Sample.txt"
BUNDLE_DEDICATION = "dedication.txt"
BUNDLE_ABOUT = "about-author.txt"
BUNDLE_SUBTITLE = "subtitle.txt"

DEFAULT_BASE_URL = "https://example.com"
WORDS_PER_MINUTE = 250
WORDS_PER_PAGE = 250
SHORT_CHAPTER_WORDS = 100
LARGE_IMAGE_BYTES = 5 * 1024 * 1024
