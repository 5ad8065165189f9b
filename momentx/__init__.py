"""
MomentX coffee NFT demo driver.

Publishes the compiled coffee NFT package to a Sui node, runs the merchant,
airdrop and redemption calls, and reads the resulting state back.
"""

__version__ = "0.1.0"
