"""TapVote survey vote intake and aggregation backend."""
