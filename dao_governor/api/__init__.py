# dao_governor/api/__init__.py
