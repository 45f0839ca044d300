# /run.py
import os

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

# Now, import the app factory
from clinic import create_app

# Create the app instance
app = create_app(os.environ.get('FLASK_CONFIG', 'default'))

if __name__ == '__main__':
    app.run(host=os.environ.get('HOST', '127.0.0.1'), port=int(os.environ.get('PORT', 5000)))
