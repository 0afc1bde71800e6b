from __future__ import annotations


class InternalFault(Exception):
    """Lỗi hạ tầng (filesystem, spawn process...) không thuộc lỗi của code người dùng.

    `detail` chỉ dùng để log; message trả về cho client luôn là chuỗi chung.
    """

    public_message = "Internal error"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)
