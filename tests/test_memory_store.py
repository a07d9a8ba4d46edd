#!/usr/bin/env python3
"""
Unit tests for the in-memory store.

Run with:
    python -m pytest tests/test_memory_store.py
"""
import os
import sys
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.errors import AlreadyExists, NotFound
from app.repositories import MemoryStore, POPULAR_GAMES_LIMIT


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

USER_ID = '123456'
USER_NAME = 'Paulão'
GROUP_ID = 'PG'
GROUP_NAME = 'Paulão Games'
GROUP_DESCRIPTION = 'This is a description'
GAME = {
    'id': 'I9azM1kA6l',
    'name': 'Monopoly Skyrim',
    'url': 'games.net/skyrim',
    'image': 'skyrim.jpg',
    'publisher': 'Bethesda Game Studios',
    'amazon_rank': 1,
    'price': 420.69,
}


def _game(game_id: str, name: str = None) -> dict:
    return {'id': game_id, 'name': name or f'Game {game_id}', 'url': '', 'image': '',
            'publisher': None, 'amazon_rank': None, 'price': None}


class StoreTestCase(unittest.TestCase):
    """Fresh store with one user and one empty group."""

    def setUp(self):
        self.store = MemoryStore()
        self.created = self.store.create_user(USER_ID, USER_NAME)
        self.store.create_group(USER_ID, GROUP_ID, GROUP_NAME, GROUP_DESCRIPTION)


# ===========================================================================
# Users and tokens
# ===========================================================================

class TestUsers(unittest.TestCase):

    def setUp(self):
        self.store = MemoryStore()

    def test_create_user_returns_id_token_and_name(self):
        info = self.store.create_user(USER_ID, USER_NAME)
        self.assertEqual(info['userId'], USER_ID)
        self.assertEqual(info['name'], USER_NAME)
        self.assertTrue(info['token'])

    def test_new_user_has_empty_groups(self):
        self.store.create_user(USER_ID, USER_NAME)
        self.assertEqual(self.store.get_user(USER_ID), {'name': USER_NAME, 'groups': {}})

    def test_duplicate_user_raises_already_exists(self):
        self.store.create_user(USER_ID, USER_NAME)
        with self.assertRaises(AlreadyExists) as cm:
            self.store.create_user(USER_ID, 'Someone else')
        self.assertEqual(cm.exception.info, {'userId': USER_ID})

    def test_duplicate_user_leaves_state_unchanged(self):
        first = self.store.create_user(USER_ID, USER_NAME)
        with self.assertRaises(AlreadyExists):
            self.store.create_user(USER_ID, 'Someone else')
        self.assertEqual(self.store.get_user(USER_ID)['name'], USER_NAME)
        self.assertEqual(len(self.store.tokens), 1)
        self.assertEqual(self.store.token_to_user_id(first['token']), USER_ID)

    def test_get_missing_user_raises_not_found(self):
        with self.assertRaises(NotFound) as cm:
            self.store.get_user('undefined')
        self.assertEqual(cm.exception.info, {'userId': 'undefined'})

    def test_token_maps_to_user(self):
        info = self.store.create_user(USER_ID, USER_NAME)
        self.assertEqual(self.store.token_to_user_id(info['token']), USER_ID)

    def test_tokens_are_unique(self):
        a = self.store.create_user('a', 'A')
        b = self.store.create_user('b', 'B')
        self.assertNotEqual(a['token'], b['token'])

    def test_unknown_token_returns_none(self):
        self.assertIsNone(self.store.token_to_user_id(''))
        self.assertIsNone(self.store.token_to_user_id('nope'))
        self.assertIsNone(self.store.token_to_user_id(None))

    def test_seed_users(self):
        self.store.seed_users([('A48309', 'André Santos', '5d389af1-06db-4401-8aef-36d8d6428f31')])
        self.assertEqual(self.store.token_to_user_id('5d389af1-06db-4401-8aef-36d8d6428f31'),
                         'A48309')
        self.assertEqual(self.store.get_user('A48309')['groups'], {})

    def test_seed_existing_user_raises(self):
        self.store.create_user(USER_ID, USER_NAME)
        with self.assertRaises(AlreadyExists):
            self.store.seed_users([('A48309', 'André Santos', 'tok-a'),
                                   (USER_ID, USER_NAME, 'tok-b')])
        self.assertEqual(list(self.store.users), [USER_ID])
        self.assertIsNone(self.store.token_to_user_id('tok-a'))
        self.assertIsNone(self.store.token_to_user_id('tok-b'))


# ===========================================================================
# Groups
# ===========================================================================

class TestGroups(StoreTestCase):

    def test_create_group_returns_summary(self):
        self.assertEqual(
            self.store.create_group(USER_ID, 'ABC', GROUP_NAME, GROUP_DESCRIPTION),
            {'groupId': 'ABC', 'name': GROUP_NAME, 'description': GROUP_DESCRIPTION},
        )

    def test_created_group_round_trips(self):
        self.assertEqual(self.store.get_group(USER_ID, GROUP_ID), {
            'name': GROUP_NAME, 'description': GROUP_DESCRIPTION, 'games': {},
        })

    def test_duplicate_group_raises_already_exists(self):
        with self.assertRaises(AlreadyExists) as cm:
            self.store.create_group(USER_ID, GROUP_ID, 'x', 'y')
        self.assertEqual(cm.exception.info, {'groupId': GROUP_ID})

    def test_same_group_id_allowed_for_other_user(self):
        self.store.create_user('other', 'Other')
        self.store.create_group('other', GROUP_ID, 'x', 'y')
        self.assertEqual(self.store.get_group('other', GROUP_ID)['name'], 'x')
        self.assertEqual(self.store.get_group(USER_ID, GROUP_ID)['name'], GROUP_NAME)

    def test_create_group_for_missing_user_raises(self):
        with self.assertRaises(NotFound) as cm:
            self.store.create_group('ghost', 'G', 'x', 'y')
        self.assertEqual(cm.exception.info, {'userId': 'ghost'})

    def test_edit_group_both_fields(self):
        summary = self.store.edit_group(USER_ID, GROUP_ID, 'FPS Games', 'Another description')
        self.assertEqual(summary, {'groupId': GROUP_ID, 'name': 'FPS Games',
                                   'description': 'Another description'})
        self.assertEqual(self.store.get_group(USER_ID, GROUP_ID), {
            'name': 'FPS Games', 'description': 'Another description', 'games': {},
        })

    def test_edit_group_name_only_keeps_description(self):
        self.store.edit_group(USER_ID, GROUP_ID, new_name='FPS Games')
        group = self.store.get_group(USER_ID, GROUP_ID)
        self.assertEqual(group['name'], 'FPS Games')
        self.assertEqual(group['description'], GROUP_DESCRIPTION)

    def test_edit_group_description_only_keeps_name(self):
        self.store.edit_group(USER_ID, GROUP_ID, new_description='new')
        group = self.store.get_group(USER_ID, GROUP_ID)
        self.assertEqual(group['name'], GROUP_NAME)
        self.assertEqual(group['description'], 'new')

    def test_edit_group_keeps_games(self):
        self.store.add_game_to_group(USER_ID, GROUP_ID, GAME)
        self.store.edit_group(USER_ID, GROUP_ID, 'n', 'd')
        self.assertIn(GAME['id'], self.store.get_group(USER_ID, GROUP_ID)['games'])

    def test_edit_missing_group_raises(self):
        with self.assertRaises(NotFound):
            self.store.edit_group(USER_ID, 'nope', 'n', 'd')

    def test_list_groups(self):
        self.assertEqual(self.store.list_groups(USER_ID), {
            GROUP_ID: {'name': GROUP_NAME, 'description': GROUP_DESCRIPTION, 'games': {}},
        })

    def test_delete_group_returns_summary(self):
        self.assertEqual(self.store.delete_group(USER_ID, GROUP_ID), {
            'groupId': GROUP_ID, 'name': GROUP_NAME, 'description': GROUP_DESCRIPTION,
        })

    def test_get_after_delete_raises_not_found(self):
        self.store.delete_group(USER_ID, GROUP_ID)
        with self.assertRaises(NotFound) as cm:
            self.store.get_group(USER_ID, GROUP_ID)
        self.assertEqual(cm.exception.info, {'groupId': GROUP_ID})

    def test_delete_missing_group_raises(self):
        with self.assertRaises(NotFound) as cm:
            self.store.delete_group(USER_ID, 'undefined')
        self.assertEqual(cm.exception.info, {'groupId': 'undefined'})

    def test_delete_group_keeps_catalog_entry(self):
        self.store.add_game_to_group(USER_ID, GROUP_ID, GAME)
        self.store.delete_group(USER_ID, GROUP_ID)
        self.assertEqual(self.store.games[GAME['id']], GAME)


# ===========================================================================
# Games
# ===========================================================================

class TestGames(StoreTestCase):

    def test_add_game_returns_record(self):
        self.assertEqual(self.store.add_game_to_group(USER_ID, GROUP_ID, GAME), GAME)

    def test_added_game_is_retrievable(self):
        self.store.add_game_to_group(USER_ID, GROUP_ID, GAME)
        self.assertEqual(self.store.get_game_from_group(USER_ID, GROUP_ID, GAME['id']), GAME)
        self.assertEqual(self.store.get_group(USER_ID, GROUP_ID)['games'],
                         {GAME['id']: GAME['name']})

    def test_add_game_to_missing_group_does_not_touch_catalog(self):
        with self.assertRaises(NotFound):
            self.store.add_game_to_group(USER_ID, 'nope', GAME)
        self.assertNotIn(GAME['id'], self.store.games)

    def test_add_game_upserts_catalog(self):
        self.store.add_game_to_group(USER_ID, GROUP_ID, GAME)
        updated = dict(GAME, price=1.0)
        self.store.add_game_to_group(USER_ID, GROUP_ID, updated)
        self.assertEqual(self.store.games[GAME['id']]['price'], 1.0)

    def test_remove_game_returns_record_and_restores_group(self):
        before = dict(self.store.get_group(USER_ID, GROUP_ID)['games'])
        self.store.add_game_to_group(USER_ID, GROUP_ID, GAME)
        self.assertEqual(self.store.remove_game_from_group(USER_ID, GROUP_ID, GAME['id']), GAME)
        self.assertEqual(self.store.get_group(USER_ID, GROUP_ID)['games'], before)

    def test_second_remove_raises_not_found(self):
        self.store.add_game_to_group(USER_ID, GROUP_ID, GAME)
        self.store.remove_game_from_group(USER_ID, GROUP_ID, GAME['id'])
        with self.assertRaises(NotFound) as cm:
            self.store.remove_game_from_group(USER_ID, GROUP_ID, GAME['id'])
        self.assertEqual(cm.exception.info, {'gameId': GAME['id']})

    def test_game_in_catalog_but_not_in_group_is_not_found(self):
        self.store.create_group(USER_ID, 'other', 'o', 'o')
        self.store.add_game_to_group(USER_ID, 'other', GAME)
        with self.assertRaises(NotFound):
            self.store.get_game_from_group(USER_ID, GROUP_ID, GAME['id'])
        with self.assertRaises(NotFound):
            self.store.remove_game_from_group(USER_ID, GROUP_ID, GAME['id'])

    def test_remove_keeps_catalog_entry(self):
        self.store.add_game_to_group(USER_ID, GROUP_ID, GAME)
        self.store.remove_game_from_group(USER_ID, GROUP_ID, GAME['id'])
        self.assertIn(GAME['id'], self.store.games)


# ===========================================================================
# Popular games
# ===========================================================================

class TestPopularGames(StoreTestCase):

    def test_empty_when_no_games(self):
        self.assertEqual(self.store.get_popular_games(), [])

    def test_single_game_has_count_one(self):
        self.store.add_game_to_group(USER_ID, GROUP_ID, GAME)
        self.assertEqual(self.store.get_popular_games(), [{'game': GAME, 'count': 1}])

    def test_ordered_by_descending_count(self):
        popular, rare = _game('popular'), _game('rare')
        self.store.add_game_to_group(USER_ID, GROUP_ID, rare)
        for i in range(3):
            user_id = f'u{i}'
            self.store.create_user(user_id, user_id)
            self.store.create_group(user_id, 'g', 'g', 'g')
            self.store.add_game_to_group(user_id, 'g', popular)

        result = self.store.get_popular_games()
        self.assertEqual([e['game']['id'] for e in result], ['popular', 'rare'])
        self.assertEqual([e['count'] for e in result], [3, 1])

    def test_counts_across_groups_of_same_user(self):
        self.store.create_group(USER_ID, 'second', 's', 's')
        self.store.add_game_to_group(USER_ID, GROUP_ID, GAME)
        self.store.add_game_to_group(USER_ID, 'second', GAME)
        self.assertEqual(self.store.get_popular_games()[0]['count'], 2)

    def test_ties_keep_first_occurrence_order(self):
        for game_id in ('c', 'a', 'b'):
            self.store.add_game_to_group(USER_ID, GROUP_ID, _game(game_id))
        self.assertEqual([e['game']['id'] for e in self.store.get_popular_games()],
                         ['c', 'a', 'b'])

    def test_limited_to_twenty(self):
        for i in range(POPULAR_GAMES_LIMIT + 5):
            self.store.add_game_to_group(USER_ID, GROUP_ID, _game(f'g{i}'))
        self.assertEqual(len(self.store.get_popular_games()), POPULAR_GAMES_LIMIT)

    def test_removed_reference_no_longer_counted(self):
        self.store.add_game_to_group(USER_ID, GROUP_ID, GAME)
        self.store.remove_game_from_group(USER_ID, GROUP_ID, GAME['id'])
        self.assertEqual(self.store.get_popular_games(), [])


# ===========================================================================
# Reset helpers
# ===========================================================================

class TestReset(StoreTestCase):

    def test_reset_all_clears_everything(self):
        self.store.add_game_to_group(USER_ID, GROUP_ID, GAME)
        self.store.reset_all()
        self.assertEqual(self.store.users, {})
        self.assertEqual(self.store.games, {})
        self.assertIsNone(self.store.token_to_user_id(self.created['token']))

    def test_reset_all_groups_keeps_users(self):
        self.store.reset_all_groups()
        self.assertEqual(self.store.get_user(USER_ID), {'name': USER_NAME, 'groups': {}})
        self.assertEqual(self.store.token_to_user_id(self.created['token']), USER_ID)


if __name__ == '__main__':
    unittest.main()
