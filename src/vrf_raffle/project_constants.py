"""
Default parameters for the raffle.

These values define the public rules of a round.
Changing them changes who may enter and when a draw can fire, so they
MUST be announced before a round opens.
"""

# Native token uses 18 decimals (wei-style raw units)
TOKEN_DECIMALS = 18

# Minimum accepted value per entry (raw units)
ENTRANCE_FEE = 10**16  # 0.01 token

# Minimum seconds between round start and the draw
INTERVAL_S = 30

# Randomness request parameters
KEY_HASH = "0x787d74caea10b2b357790d5b5247c2f63d1d91572a9846f780606e4d953677ae"
SUBSCRIPTION_ID = 0
REQUEST_CONFIRMATIONS = 3
CALLBACK_GAS_LIMIT = 500_000
NUM_WORDS = 1

# Pay the randomness fee in the native token instead of LINK
NATIVE_PAYMENT = False

# Leading tag of encoded extra args (bytes4(keccak256("VRF ExtraArgsV1")))
EXTRA_ARGS_V1_TAG = bytes.fromhex("92fd1338")
