import pytest

SCENARIO_A = {
    'basic_salary_percentage': 60,
    'hra_percentage': 10,
    'standard_allowance_percentage': 0.5,
    'performance_bonus_percentage': 8.33,
    'leave_travel_allowance_percentage': 8.33,
    'pf_employee_percentage': 12,
    'pf_employer_percentage': 12,
}


@pytest.fixture
def scenario_a():
    return dict(SCENARIO_A)


class FakeDatabase:
    """Dict of collections that also records admin commands."""

    def __init__(self):
        self.collections = {}
        self.commands = []

    def __getitem__(self, name):
        if name not in self.collections:
            self.collections[name] = FakeCollection(name, self)
        return self.collections[name]

    def command(self, name):
        self.commands.append(name)
        return {'ok': 1.0}


class FakeCollection:
    """Just enough of a pymongo collection for the salary store."""

    def __init__(self, name, database):
        self.name = name
        self.database = database
        self.documents = []

    def _matches(self, document, query):
        return all(document.get(k) == v for k, v in query.items())

    def find_one(self, query, projection=None):
        for document in self.documents:
            if self._matches(document, query):
                found = dict(document)
                for field, include in (projection or {}).items():
                    if not include:
                        found.pop(field, None)
                return found
        return None

    def replace_one(self, query, replacement, upsert=False):
        for index, document in enumerate(self.documents):
            if self._matches(document, query):
                self.documents[index] = dict(replacement, _id=document['_id'])
                return
        if upsert:
            self.documents.append(dict(replacement, _id=len(self.documents) + 1))


@pytest.fixture
def fake_db():
    return FakeDatabase()
