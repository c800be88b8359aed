"""
Loading of UI design images for the design model.
"""

import base64
from pathlib import Path
from typing import Union

from PIL import Image, UnidentifiedImageError

from design_to_code.models import ImageAttachment


class ImageLoader:
    """Loads design screenshots and encodes them as inline attachments."""

    @staticmethod
    def mime_type_for(image_path: Union[str, Path]) -> str:
        """PNG files are sent as image/png, everything else as image/jpeg."""
        if Path(image_path).suffix.lower() == ".png":
            return "image/png"
        return "image/jpeg"

    def validate_image(self, image_path: Union[str, Path]) -> Path:
        """
        Check that a path exists and holds an image Pillow can identify.

        Args:
            image_path: Path to the image file.

        Returns:
            The path as a Path object.
        """
        image_path = Path(image_path)
        if not image_path.exists():
            raise FileNotFoundError(f"Image not found: {image_path}")

        try:
            with Image.open(image_path) as image:
                image.verify()
        except UnidentifiedImageError:
            raise ValueError(f"Not a readable image: {image_path}")

        return image_path

    def image_to_base64(self, image_path: Union[str, Path]) -> str:
        """Base64-encode the raw file bytes."""
        return base64.b64encode(Path(image_path).read_bytes()).decode("utf-8")

    def load_attachment(self, image_path: Union[str, Path]) -> ImageAttachment:
        """
        Load an image as an inline attachment.

        Args:
            image_path: Path to the design image.

        Returns:
            ImageAttachment with MIME type and base64 data.
        """
        image_path = self.validate_image(image_path)
        return ImageAttachment(
            mime_type=self.mime_type_for(image_path),
            data=self.image_to_base64(image_path),
            path=image_path,
        )
