from dataclasses import asdict
from xml.etree.ElementTree import Element

# namespaces used by the spreadsheet feeds
NAMESPACES = {
    "atom": "http://www.w3.org/2005/Atom",
    "gs": "http://schemas.google.com/spreadsheets/2006",
    "batch": "http://schemas.google.com/gdata/batch",
    "openSearch": "http://a9.com/-/spec/opensearchrss/1.0/",
}

def find_text(elem: Element, path: str, default: str = "") -> str:
    """
    Text of the first node matching path (namespace prefixes as in NAMESPACES)
    or default if nothing matches.  Text is the concatenation of all the text
    below the node, not just the leading text.
    """
    node = elem.find(path, NAMESPACES)
    if node is None:
        return default
    return "".join(node.itertext())

def find_link(elem: Element, rel: str) -> str:
    """href of the atom:link with the given rel, empty if there isn't one"""
    for link in elem.findall("atom:link", NAMESPACES):
        if link.get("rel") == rel:
            return link.get("href", "")
    return ""

class GDataResourceBase():
    """
    Intended to be subclassed by a dataclass but isnt actually a dataclass.
    Subclasses parse themselves out of an Atom element with from_element()
    and call fixup() from __post_init__ to coerce the raw strings.
    """
    @classmethod
    def from_element(cls, elem: Element):
        """Build the resource from a parsed Atom element."""
        raise NotImplementedError(cls.__name__)

    def to_base(self) -> dict:
        """
        Default just return the dict representation of the object.
        Call fixup() first to ensure all fields are in correct format.
        """
        self.fixup()
        return asdict(self)

    def fixup(self) -> None:
        """
        notify a subclass to do any field adjustments
        """
        pass

