"""
Utilities for tag models
"""

RESERVED_TAG_CHARS = [
    ',',  # Used to join tag ids and names in metadata blobs and in get_tag_ids()
          # e.g. metadata tags="12,Reptiles,#new#Insects"
    '/',  # Used to separate aliases (or titles) of ancestors in Tag.path
          # e.g. path="animals/mammals/cats"
]
TAGS_SEPARATOR = RESERVED_TAG_CHARS[0]
PATH_SEPARATOR = RESERVED_TAG_CHARS[1]
