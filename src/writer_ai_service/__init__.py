"""Writer AI Service - LLM text improvement with an on-disk response cache.

Layers:
    - protocols: Interface contracts (CacheStore, LlmProvider)
    - repositories: Data access (SQLite cache store, HTTP LLM adapter)
    - services: Business logic (CacheService, ProcessService)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from writer_ai_service.config import load_settings
    from writer_ai_service.api.app import create_app

    app = create_app(settings=load_settings())
    ```
"""

__version__ = "0.1.0"
