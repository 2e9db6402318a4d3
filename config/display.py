# Part of Pizzabox - Licensed under GPL 3.0
# See LICENSE.md for details

"""
Display Settings

Limits and styling for song listings (playlist pages, album embeds).
Discord enforces the hard limits, so only lower these.
"""

# Songs per page of the /playlist view
PLAYLIST_PAGE_SIZE = 10

# Plain-text messages are split before this many characters (Discord max is 2000)
MESSAGE_CHUNK_LIMIT = 1900

# Embed descriptions are split at this many characters (Discord max is 4096)
EMBED_DESCRIPTION_LIMIT = 4096

# Seconds the Previous/Next buttons stay active
PAGINATION_TIMEOUT = 60

# Embed side color
EMBED_COLOR = 0xFFA500

__all__ = [
    'PLAYLIST_PAGE_SIZE',
    'MESSAGE_CHUNK_LIMIT',
    'EMBED_DESCRIPTION_LIMIT',
    'PAGINATION_TIMEOUT',
    'EMBED_COLOR',
]
