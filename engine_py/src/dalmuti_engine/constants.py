"""Game constants"""

# Card ranks: 1 (strongest) .. 12 (weakest), plus two Jokers
JOKER = 'joker'
MIN_RANK = 1
MAX_RANK = 12
JOKER_COUNT = 2
DECK_SIZE = sum(range(MIN_RANK, MAX_RANK + 1)) + JOKER_COUNT  # 80

# An all-Joker set compares as this rank
JOKER_ONLY_RANK = 13
JOKER_VALUE = 0

REVOLUTION_MIN_CARDS = 8

# Player types
PLAYER_HUMAN = 'human'
PLAYER_AI = 'ai'

# AI difficulty tiers
DIFFICULTY_EASY = 'easy'
DIFFICULTY_MEDIUM = 'medium'
DIFFICULTY_HARD = 'hard'
DIFFICULTIES = (DIFFICULTY_EASY, DIFFICULTY_MEDIUM, DIFFICULTY_HARD)

# Game phases
PHASE_WAITING = 'waiting'
PHASE_TAX = 'tax'
PHASE_PLAYING = 'playing'
PHASE_FINISHED = 'finished'

# Room limits
MAX_PLAYERS = 8
MIN_PLAYERS = 2

# Tax exchange sizes
TAX_TOP_COUNT = 2
TAX_SECOND_COUNT = 1
TAX_SECOND_PAIR_MIN_PLAYERS = 4

# Titles by finishing place
TITLE_GREATER_DALMUTI = 'Greater Dalmuti'
TITLE_LESSER_DALMUTI = 'Lesser Dalmuti'
TITLE_MERCHANT = 'Merchant'
TITLE_LESSER_PEON = 'Lesser Peon'
TITLE_GREATER_PEON = 'Greater Peon'

# Outbound events
EVENT_ROOM_UPDATED = 'room-updated'
EVENT_GAME_STARTED = 'game-started'
EVENT_GAME_UPDATED = 'game-updated'
EVENT_GAME_FINISHED = 'game-finished'
EVENT_TAX_REQUEST = 'tax-request'
EVENT_PLAYER_JOINED = 'player-joined'
EVENT_PLAYER_LEFT = 'player-left'
EVENT_ERROR = 'error'

# Seconds an AI waits before acting
DEFAULT_AI_MOVE_DELAY = 1.0
