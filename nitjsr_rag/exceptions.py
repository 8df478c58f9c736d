class RagError(Exception):
    """Base class for indexing and answering failures."""


class ConfigurationError(RagError):
    """A required setting is missing or an external service is unreachable at startup."""


class EmbeddingError(RagError):
    pass


class GenerationError(RagError):
    pass


class VectorStoreError(RagError):
    pass
