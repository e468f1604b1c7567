"""TalentRank candidate ranking service."""
