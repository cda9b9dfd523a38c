import fitz, hashlib
from typing import List, Optional
from ..models.extract_models import ExtractResult, ExtractMeta, ExtractPage

TEXT_SUFFIXES = (".txt", ".md")
# formats PyMuPDF opens directly
FITZ_FILETYPES = {
    "application/pdf": "pdf",
    "application/epub+zip": "epub",
    "application/vnd.ms-xpsdocument": "xps",
    "application/oxps": "xps",
}

def _sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()

def _is_text(filename: str, content_type: Optional[str]) -> bool:
    if content_type and content_type.startswith("text/"):
        return True
    return filename.lower().endswith(TEXT_SUFFIXES)

def _fitz_filetype(filename: str, content_type: Optional[str]) -> str:
    if content_type in FITZ_FILETYPES:
        return FITZ_FILETYPES[content_type]
    suffix = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    return suffix if suffix in ("pdf", "epub", "xps", "oxps") else "pdf"

def extract_from_bytes(filename: str, data: bytes, content_type: Optional[str] = None) -> ExtractResult:
    filehash = _sha256(data)

    if _is_text(filename, content_type):
        text = data.decode("utf-8", errors="replace")
        return ExtractResult(
            ok=True,
            meta=ExtractMeta(filename=filename, page_count=1, sha256=filehash, content_type=content_type),
            pages=[ExtractPage(page=1, text=text)],
        )

    try:
        doc = fitz.open(stream=data, filetype=_fitz_filetype(filename, content_type))
    except Exception as e:
        return ExtractResult(
            ok=False,
            meta=ExtractMeta(filename=filename, page_count=0, sha256=filehash, content_type=content_type),
            pages=[],
            error=f"Cannot open document: {e}",
        )

    pages: List[ExtractPage] = []
    with doc:
        for i in range(len(doc)):
            page = doc[i]
            pages.append(ExtractPage(page=i+1, text=page.get_text("text")))

    meta = ExtractMeta(filename=filename, page_count=len(pages), sha256=filehash, content_type=content_type)
    return ExtractResult(ok=True, meta=meta, pages=pages)
