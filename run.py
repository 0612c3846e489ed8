from pickpool import create_app, db
from pickpool.models import Game, Submission, SubmissionPick

app = create_app()


@app.shell_context_processor
def make_shell_context():
    return {
        "db": db,
        "Game": Game,
        "Submission": Submission,
        "SubmissionPick": SubmissionPick,
        "pool_service": app.extensions["pool_service"],
    }


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
