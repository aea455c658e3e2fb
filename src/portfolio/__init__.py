"""Portfolio content service.

Cache-aside content reads, write-invalidate mutations, unique slug
assignment and login abuse rate limiting for a portfolio CMS.
"""

__version__ = "0.1.0"
