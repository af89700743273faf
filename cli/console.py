"""Console UI for deutschweg application."""

import requests

from cli.api_client import DeutschWegAPIClient

FLASHCARD_KINDS = ('flashcard-de-en', 'flashcard-en-de')


class ConsoleUI:
    """Console user interface for deutschweg application."""

    def __init__(self, client: DeutschWegAPIClient, level: str = None):
        self.client = client
        self.level = level

    def print_dashboard(self, status: dict):
        """Print due count and catalog summary."""
        print('\n' + '=' * 50)
        print('DEUTSCHWEG')
        print('=' * 50)
        print(f'Items due for review: {status["due_count"]}')
        print(f'Catalog: {status["total_items"]} items')
        for category, count in status['items_by_category'].items():
            print(f'  {category}: {count}')
        print('=' * 50)

    def print_modes(self, modes: list[dict]):
        print('\nChoose a mode:')
        for i, mode in enumerate(modes, 1):
            print(f'  {i:2}. {mode["mode"]}')
        print('  Type a number, "list <category>" to see its words, or "exit" to quit.')

    def print_question(self, question: dict, remaining: int):
        print('\n' + '-' * 40)
        print(f'[{question["category"]} {question["level"]}] {remaining} left')
        if question.get('instruction'):
            print(question['instruction'])
        print(f'\n>>> {question["prompt"]}')
        if question.get('choices') and question['kind'] not in FLASHCARD_KINDS:
            print(f'Choices: {" / ".join(question["choices"])}')

    def print_result(self, result: dict):
        if result['correct']:
            print('Richtig!')
        else:
            print(f'Falsch. Correct answer: {result["correct_answer"]}')
        print(f'Next review in rank {result["repetition_rank"]} at {result["next_review_at"]}')

    def print_summary(self, summary: dict | None):
        if not summary:
            return
        print('\n' + '=' * 40)
        print(f'Session complete ({summary["mode"]})')
        print(f'Answered: {summary["answered"]}/{summary["total"]}, correct: {summary["correct"]}')
        if summary['known']:
            print(f'Marked as known: {summary["known"]}')
        if summary['skipped']:
            print(f'Skipped: {summary["skipped"]}')
        print('=' * 40)

    def print_item(self, item: dict):
        print('\n--- ' + item.get('title', 'Details') + ' ---')
        print(f'English: {item.get("english", "")}')
        if item.get('plural'):
            print(f'Plural: die {item["plural"]}')
        if item.get('conjugation'):
            for pronoun, form in item['conjugation'].items():
                print(f'  {pronoun:10} {form}')
        if item.get('partizip_ii'):
            print(f'Perfect: {item.get("perfect_aux", "haben")} ... {item["partizip_ii"]}')
        print(item.get('details', ''))
        if item.get('example'):
            print(f'Example: {item["example"]["de"]} ({item["example"]["en"]})')
        print('-' * 20)

    def show_catalog(self, category: str):
        """Print the words of one category, at the chosen level if any."""
        if not category:
            print('Usage: list <category>, e.g. "list nouns"')
            return
        try:
            data = self.client.list_catalog(category, level=self.level)
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code == 400:
                print(f'Unknown category: {category}')
                return
            raise
        print(f'\n{data["name"]}' + (f' ({self.level})' if self.level else ''))
        for item in data['items']:
            german = item.get('infinitive') or item.get('word', '')
            if item.get('article'):
                german = f'{item["article"]} {german}'
            print(f'  {german:25} {item["english"]}')

    def choose_mode(self, modes: list[dict]) -> str | None:
        """Return a mode name, or None to quit."""
        while True:
            self.print_modes(modes)
            raw = input('==> ').strip()
            user_input = raw.lower()
            if user_input in ('exit', 'quit'):
                return None
            if user_input.startswith('list'):
                # Category keys are camelCase (modalVerbs)
                self.show_catalog(raw[4:].strip())
                continue
            if user_input.isdigit() and 1 <= int(user_input) <= len(modes):
                return modes[int(user_input) - 1]['mode']
            names = [m['mode'] for m in modes]
            if user_input in names:
                return user_input
            print('Unknown mode.')

    def ask_flashcard(self, question: dict) -> bool | None:
        """Show the back of the card and ask for a self-grade. None means exit."""
        input('(press Enter to flip) ')
        print(f'<<< {question["back"]}')
        while True:
            user_input = input('Did you know it? [y/n] ').strip().lower()
            if user_input == 'exit':
                return None
            if user_input in ('y', 'yes'):
                return True
            if user_input in ('n', 'no'):
                return False

    def run_session(self, mode: str):
        """Question loop for one session."""
        try:
            started = self.client.start_session(mode, level=self.level)
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code == 409:
                print('No items to practice for this category right now!')
                return
            raise
        print(f'\n{started["queue_length"]} questions. '
              'Commands: "known" to skip a word you know, "info" for details, "exit" to stop.')

        while True:
            data = self.client.get_question()
            if data['finished']:
                self.print_summary(data.get('summary'))
                return
            question = data['question']
            self.print_question(question, data['remaining'])

            if question['kind'] in FLASHCARD_KINDS:
                answer = self.ask_flashcard(question)
                if answer is None:
                    self.print_summary(self.client.end_session().get('summary'))
                    return
            else:
                answer = ''
                while not answer:
                    user_input = input('==> ').strip()
                    if user_input.lower() == 'exit':
                        self.print_summary(self.client.end_session().get('summary'))
                        return
                    elif user_input.lower() == 'known':
                        answer = None
                        break
                    elif user_input.lower() == 'info':
                        self.print_item(self.client.get_item(question['item_id']))
                        print(f'\n>>> {question["prompt"]}')
                    else:
                        answer = user_input
                if answer is None:
                    result = self.client.mark_known()
                    print('Marked as known.')
                    if result['finished']:
                        self.print_summary(result.get('summary'))
                        return
                    continue

            pronoun = question.get('context', {}).get('pronoun')
            result = self.client.submit_answer(answer, context=pronoun)
            self.print_result(result)
            input('(press Enter to continue) ')
            advanced = self.client.advance()
            if advanced['finished']:
                self.print_summary(advanced.get('summary'))
                return

    def run(self):
        """Run the main application loop."""
        # Check server connection
        try:
            health = self.client.health_check()
            print(f"Connected to deutschweg server ({health['service']})")
        except requests.RequestException:
            print(f"Error: Cannot connect to server at {self.client.base_url}")
            print("Make sure the server is running: python run_server.py")
            return

        modes = self.client.get_modes()['modes']
        while True:
            try:
                self.print_dashboard(self.client.get_status())
            except requests.RequestException as e:
                print(f"Error getting status: {e}")
            mode = self.choose_mode(modes)
            if mode is None:
                print('Tschüss!')
                return
            try:
                self.run_session(mode)
            except requests.RequestException as e:
                print(f"Error during session: {e}")
