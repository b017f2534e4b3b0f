"""
Code registry: creates and looks up the records behind printed QR codes
"""

from io import BytesIO

import qrcode
import structlog

from parking_qr.core.errors import NotFoundError
from parking_qr.models import CodeRecord
from parking_qr.store import RecordStore

logger = structlog.get_logger(__name__)


class CodeRegistry:
    """CodeRecord creation and lookup"""

    def __init__(self, store: RecordStore):
        self.store = store

    def create(
        self,
        owner_id: str,
        name: str,
        email: str,
        address: str,
        phone: str,
        base_url: str,
    ) -> CodeRecord:
        """
        Create and persist a CodeRecord

        The identifier is generated before the write and qr_value is derived
        from it, so the stored record and the URL printed on the code always
        agree.

        Args:
            owner_id: Owning Owner identifier
            name, email, address, phone: Contact details shown on the scan page
            base_url: Scheme and host the QR code should point at

        Returns:
            The persisted CodeRecord
        """
        record = CodeRecord.build(
            owner_id=owner_id,
            name=name,
            email=email,
            address=address,
            phone=phone,
            base_url=base_url,
        )
        saved = self.store.create_code_record(record)
        logger.info(f"Code record created: {saved.id}", owner_id=owner_id)
        return saved

    def count_for(self, owner_id: str) -> int:
        return self.store.count_code_records(owner_id)

    def list_for_owner(self, owner_id: str) -> list[CodeRecord]:
        return self.store.list_code_records(owner_id)

    def get_by_id(self, record_id: str) -> CodeRecord:
        record = self.store.find_code_record(record_id)
        if record is None:
            raise NotFoundError("QR code")
        return record

    def render_png(self, record: CodeRecord, box_size: int = 10, border: int = 4) -> bytes:
        """Render the QR image for a record's public URL"""
        qr = qrcode.QRCode(
            version=None,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=box_size,
            border=border,
        )
        qr.add_data(record.qr_value)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")
        buffer = BytesIO()
        img.save(buffer, format="PNG")
        return buffer.getvalue()
