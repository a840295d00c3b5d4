"""
User-facing message catalog.

Keys match the wizard's translation keys so a frontend can swap in its own
localized strings.
"""

MESSAGES: dict[str, str] = {
    "fileTypeNotSupported": "This file type is not supported. Please upload a .vec file.",
    "fileTooLarge": "The file is too large. The maximum size is {maxSize}.",
    "form.errors.userNameRequired": "Please enter your name.",
    "form.errors.organizationRequired": "Please enter your organization.",
    "form.errors.fileRequired": "Please select a file to upload.",
    "uploadError": "The file could not be uploaded. Please try again.",
    "processingError": "An error occurred while processing the file.",
    "parseError": "The file could not be read. Please check that it is a valid VEC file.",
    "generateAasError": "Failed to create AAS",
    "unexpectedError": "An unexpected error occurred. Please try again.",
}


def get_message(key: str, **params: object) -> str:
    """Render a catalog message, falling back to the key itself."""
    template = MESSAGES.get(key, key)
    if params:
        return template.format(**params)
    return template
