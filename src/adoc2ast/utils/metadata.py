#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/utils/metadata.py

"""Document metadata extracted from the AsciiDoc header.

The header of a document (title, author line, revision line and attribute
entries) ends up as document attributes. :class:`DocumentMetadata` gathers
the commonly used ones into named fields and keeps the remaining
user-defined attributes in ``custom``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class DocumentMetadata:
    """Container for extracted document metadata.

    Parameters
    ----------
    title : str | None
        Document title (the raw level-0 heading)
    author : str | None
        Primary author
    authors : list[str]
        Every author named on the author line, in order
    email : str | None
        Email address of the primary author
    subject : str | None
        The ``description`` attribute
    keywords : list[str] | None
        The ``keywords`` attribute split on commas
    language : str | None
        The ``lang`` attribute
    version : str | None
        Revision number from the revision line
    revision_date : str | None
        Revision date from the revision line
    revision_remark : str | None
        Revision remark from the revision line
    doctype : str | None
        Document type
    source_path : str | None
        File the document was read from
    custom : dict[str, Any]
        Remaining attributes defined by the document header

    """

    title: Optional[str] = None
    author: Optional[str] = None
    authors: List[str] = field(default_factory=list)
    email: Optional[str] = None
    subject: Optional[str] = None
    keywords: Optional[List[str]] = None
    language: Optional[str] = None
    version: Optional[str] = None
    revision_date: Optional[str] = None
    revision_remark: Optional[str] = None
    doctype: Optional[str] = None
    source_path: Optional[str] = None
    custom: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert metadata to dictionary, excluding None values.

        Returns
        -------
        dict
            Dictionary containing only non-None metadata fields

        """
        result: Dict[str, Any] = {}

        if self.title:
            result["title"] = self.title
        if self.author:
            result["author"] = self.author
        if self.authors:
            result["authors"] = list(self.authors)
        if self.email:
            result["email"] = self.email
        if self.subject:
            result["description"] = self.subject
        if self.keywords:
            result["keywords"] = self.keywords
        if self.language:
            result["language"] = self.language
        if self.version:
            result["version"] = self.version
        if self.revision_date:
            result["revision_date"] = self.revision_date
        if self.revision_remark:
            result["revision_remark"] = self.revision_remark
        if self.doctype:
            result["doctype"] = self.doctype
        if self.source_path:
            result["source_path"] = self.source_path

        for key, value in self.custom.items():
            if value is not None:
                result[key] = value

        return result
