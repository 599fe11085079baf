from enum import Enum

class ProductCategory(str, Enum):
    ELECTRONICS = "ELECTRONICS"
    CLOTHING = "CLOTHING"
    BOOKS = "BOOKS"
    HOME = "HOME"
    SPORTS = "SPORTS"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()
