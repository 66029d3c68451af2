# manage.py
import os
import sys
from app import create_app
from mixtape.database import db, PlaylistRecord


def create_db():
    """Creates the database tables."""
    app = create_app()
    with app.app_context():
        db_uri = app.config['SQLALCHEMY_DATABASE_URI']
        print(f"SQLALCHEMY_DATABASE_URI: {db_uri}")

        if db_uri.startswith('sqlite:///'):
            db_dir = os.path.dirname(db_uri[len('sqlite:///'):])
            if db_dir:
                os.makedirs(db_dir, exist_ok=True)
                print(f"Ensured directory exists: {db_dir}")

        db.create_all()
        print("Database tables created!")


def count_playlists(created_by=None):
    """Prints how many mixtapes are recorded, optionally for one Spotify user."""
    app = create_app()
    with app.app_context():
        query = PlaylistRecord.query
        if created_by:
            query = query.filter_by(created_by=created_by)
        print(f"Recorded playlists: {query.count()}")


USAGE = "Usage: python manage.py create_db | count_playlists [spotify_user_id]"

if __name__ == '__main__':
    if len(sys.argv) > 1:
        command = sys.argv[1]
        if command == 'create_db':
            create_db()
        elif command == 'count_playlists':
            count_playlists(sys.argv[2] if len(sys.argv) > 2 else None)
        else:
            print(f"Unknown command: {command}")
            print(USAGE)
            sys.exit(1)
    else:
        print(f"No command provided. {USAGE}")
        sys.exit(1)
