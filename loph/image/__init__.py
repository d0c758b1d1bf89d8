"""Image capability adapter package.

Scope:
    Provides the text-to-image and image-captioning clients plus the dedicated
    descriptors used by core orchestration for image intents.

Non-goals:
    - No fallback between image backends.
    - No image transformation or editing.
"""
