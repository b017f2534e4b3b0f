from parking_qr.models.owner import Owner, Plan, as_utc, new_id, utc_now
from parking_qr.models.code_record import CodeRecord, scan_url
