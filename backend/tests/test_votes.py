from impostor.game.models import Player
from impostor.game.votes import tally


PLAYERS = [Player('p1', 'Ann', True), Player('p2', 'Bob'), Player('p3', 'Cid')]


def test_counts_default_to_zero():
    outcome = tally({'p1': 'Bob', 'p2': 'Bob', 'p3': 'Ann'}, PLAYERS)
    assert outcome.counts == {'Ann': 1, 'Bob': 2, 'Cid': 0}
    assert outcome.most_voted == 'Bob'
    assert outcome.most_voted_count == 2
    assert outcome.tie is False


def test_tie_goes_to_first_encountered_vote():
    outcome = tally({'p1': 'Cid', 'p2': 'Ann', 'p3': 'Cid', 'p4': 'Ann'}, PLAYERS)
    assert outcome.most_voted == 'Cid'
    assert outcome.leaders == ['Cid', 'Ann']
    assert outcome.tie is True
    assert outcome.to_dict()['tie'] is True


def test_no_votes():
    outcome = tally({}, PLAYERS)
    assert outcome.most_voted is None
    assert outcome.counts == {'Ann': 0, 'Bob': 0, 'Cid': 0}
    assert outcome.to_dict() == {
        'counts': {'Ann': 0, 'Bob': 0, 'Cid': 0},
        'mostVoted': None,
        'mostVotedCount': 0,
        'leaders': [],
        'tie': False,
    }
