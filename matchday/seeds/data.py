DEMO_SEASON = {"name": "Demo League", "type": "LEAGUE", "league_mode": "SINGLE"}

# owner -> teams managed by that owner
DEMO_OWNERS = {
    "Ali": [
        ("Real Madrid", "Spain", "S"),
        ("Inter", "Italy", "A"),
    ],
    "Bora": [
        ("Manchester City", "England", "S"),
        ("Benfica", "Portugal", "B"),
    ],
    "Chen": [
        ("Bayern Munich", "Germany", "S"),
        ("Napoli", "Italy", "A"),
    ],
    "Dana": [
        ("Paris Saint-Germain", "France", "A"),
        ("Ajax", "Netherlands", "B"),
    ],
}
