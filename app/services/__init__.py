"""
Image gallery services.

Core Services:
- auth_service: registration, login, cookie token issuance and refresh
- image_service: image generation flow and gallery queries
- image_storage: file store for generated images
- image_provider_service & image_interface: provider abstraction and client cache
"""
