from .image_repository import ImageRepository
