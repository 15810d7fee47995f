from typing import Optional


class TraceId:
    """
    AWS X-Ray Trace ID format:
    Root=1-timestamp-randomuuid;Parent=parentid;Sampled=sampled
    """

    def __init__(self, root: str, parent: Optional[str] = None, sampled: Optional[str] = None):
        self.root = root
        self.parent = parent
        self.sampled = sampled

    @classmethod
    def parse(cls, header: str) -> "TraceId":
        """Parse a Lambda-Runtime-Trace-Id / _X_AMZN_TRACE_ID value."""
        parts = {}
        for part in header.split(";"):
            if "=" in part:
                k, v = part.split("=", 1)
                parts[k.strip()] = v.strip()

        root = parts.get("Root", "")

        # Fallback if a raw ID is provided without Root= format.
        if not root and header and "-" in header and "=" not in header:
            root = header.strip()

        return cls(root=root, parent=parts.get("Parent"), sampled=parts.get("Sampled"))

    def to_root_id(self) -> str:
        """Return only the Root ID (used for log correlation)."""
        return self.root

    def __str__(self) -> str:
        """Generate the header-formatted string."""
        s = f"Root={self.root}"
        if self.parent:
            s += f";Parent={self.parent}"
        if self.sampled:
            s += f";Sampled={self.sampled}"
        return s
