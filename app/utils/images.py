"""업로드 이미지 검증"""
from io import BytesIO
from PIL import Image

from ..models.schemas import RoomImage


def load_room_image(content: bytes) -> RoomImage:
    """업로드된 바이트가 실제 이미지인지 확인하고 RoomImage로 변환

    Raises:
        ValueError: 이미지로 읽을 수 없는 경우
    """
    try:
        with Image.open(BytesIO(content)) as image:
            image_format = image.format
            image.verify()
    except Exception as e:
        raise ValueError(f"이미지 파일을 읽을 수 없습니다: {str(e)}") from e

    mime_type = Image.MIME.get(image_format or "", "image/jpeg")
    return RoomImage(data=bytes(content), mime_type=mime_type)
