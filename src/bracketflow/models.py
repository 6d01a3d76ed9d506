from .errors import InvalidInputError


class Party:
    def __init__(self, name=None, id=None, result_text=None):
        self.name = name
        self.id = id
        self.result_text = result_text  # Optional score/result shown next to the name

    @property
    def is_known(self):
        return bool(self.name) or bool(self.id)

    @classmethod
    def from_value(cls, value):
        """Build a Party from a dict, a bare name or an existing Party.

        Returns None when the party is absent or carries neither a name nor an id.
        """
        if value is None:
            return None
        if isinstance(value, Party):
            return value if value.is_known else None
        if isinstance(value, str):
            return cls(name=value) if value.strip() else None
        if isinstance(value, dict):
            party = cls(
                name=value.get('name'),
                id=value.get('id'),
                result_text=value.get('resultText', value.get('result_text')),
            )
            return party if party.is_known else None
        raise InvalidInputError(f"Unsupported party value: {value!r}")

    def to_dict(self):
        data = {'name': self.name}
        if self.id is not None:
            data['id'] = self.id
        if self.result_text is not None:
            data['resultText'] = self.result_text
        return data

    def __eq__(self, other):
        if not isinstance(other, Party):
            return NotImplemented
        return (self.name, self.id, self.result_text) == (other.name, other.id, other.result_text)

    def __hash__(self):
        return hash((self.name, self.id, self.result_text))

    def __repr__(self):
        return f"Party(name={self.name}, id={self.id})"


class Match:
    def __init__(self, id, name=None, top_party=None, bottom_party=None,
                 number_of_rounds=None, state=None, score_mapping=None):
        self.id = id
        self.name = name
        self.top_party = top_party
        self.bottom_party = bottom_party
        self.number_of_rounds = number_of_rounds  # Best-of count, display only
        self.state = state
        self.score_mapping = score_mapping

    @property
    def parties_present(self):
        """Number of parties (0, 1 or 2) already known for this match."""
        return int(self.top_party is not None) + int(self.bottom_party is not None)

    @property
    def is_first_round(self):
        return self.parties_present == 2

    @classmethod
    def from_dict(cls, data):
        """Build a Match from a loosely-typed record.

        Accepts the camelCase keys used by bracket front-ends (topParty,
        numberOfRounds, ...) as well as snake_case keys.
        """
        if not isinstance(data, dict):
            raise InvalidInputError(f"Match record must be a mapping, got {type(data).__name__}")

        match_id = data.get('id')
        if isinstance(match_id, bool) or not isinstance(match_id, (str, int)):
            raise InvalidInputError(f"Match record has no usable id: {data!r}")
        match_id = str(match_id).strip()
        if not match_id:
            raise InvalidInputError(f"Match record has an empty id: {data!r}")

        return cls(
            id=match_id,
            name=data.get('name'),
            top_party=Party.from_value(data.get('topParty', data.get('top_party'))),
            bottom_party=Party.from_value(data.get('bottomParty', data.get('bottom_party'))),
            number_of_rounds=data.get('numberOfRounds', data.get('number_of_rounds')),
            state=data.get('state'),
            score_mapping=data.get('scoreMapping', data.get('score_mapping')),
        )

    def to_dict(self):
        data = {
            'id': self.id,
            'name': self.name,
            'topParty': self.top_party.to_dict() if self.top_party else None,
            'bottomParty': self.bottom_party.to_dict() if self.bottom_party else None,
        }
        if self.number_of_rounds is not None:
            data['numberOfRounds'] = self.number_of_rounds
        if self.state is not None:
            data['state'] = self.state
        if self.score_mapping is not None:
            data['scoreMapping'] = self.score_mapping
        return data

    def __repr__(self):
        return f"Match(id={self.id}, name={self.name}, top_party={self.top_party}, bottom_party={self.bottom_party})"


def coerce_matches(matches):
    """
    Turn a sequence of Match objects and/or match dicts into a list of Match.

    Match instances are passed through by reference (never copied or modified).
    Raises InvalidInputError for anything that is not a sequence of match records.
    """
    if matches is None or isinstance(matches, (str, bytes, dict)):
        raise InvalidInputError("Matches must be a sequence of match records")

    coerced = []
    for item in matches:
        if isinstance(item, Match):
            if not isinstance(item.id, str) or not item.id:
                raise InvalidInputError(f"Match has no usable id: {item!r}")
            coerced.append(item)
        else:
            coerced.append(Match.from_dict(item))
    return coerced
