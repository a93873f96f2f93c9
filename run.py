# run.py
import os
from certregistry.app import create_app

# Starts the Flask development server without going through 'flask run'.

if __name__ == "__main__":
    os.environ['FLASK_APP'] = 'certregistry.app'

    app = create_app(os.getenv('FLASK_CONFIG', 'development'))

    with app.app_context():
        from certregistry.models import db
        db.create_all()

    print("=" * 60)
    print(">>> Starting the Certificate Registry API")
    print("=" * 60)

    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0', port=5000)
