"""
Errors and warnings raised or returned by the bracket core.

Fatal problems with the input raise InvalidInputError. Structural ambiguity
never raises: it is reported as a StructuralAmbiguity record next to a
best-effort result.
"""


class InvalidInputError(ValueError):
    """Input that cannot produce a well-formed bracket (empty, duplicate ids, bad plan)."""


class StructuralAmbiguity:
    def __init__(self, message, section=None, strategy=None):
        self.message = message
        self.section = section
        self.strategy = strategy

    def with_section(self, section):
        return StructuralAmbiguity(self.message, section=section, strategy=self.strategy)

    def to_dict(self):
        return {
            'type': 'structural_ambiguity',
            'message': self.message,
            'section': self.section,
            'strategy': self.strategy,
        }

    def __eq__(self, other):
        if not isinstance(other, StructuralAmbiguity):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __str__(self):
        if self.section:
            return f"[{self.section}] {self.message}"
        return self.message

    def __repr__(self):
        return f"StructuralAmbiguity(section={self.section}, message={self.message})"
